#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Test module ws3000.usbio, against mocked pyusb devices"""

import time
import unittest
from unittest import mock

import usb.core
import usb.util

import ws3000
from ws3000 import usbio
from ws3000.session import Session, SessionState

from fake_usb import make_response


class FakeEndpoint(object):
    """Plays back a list of reads, then times out until stopped."""

    def __init__(self, address, reads=()):
        self.bEndpointAddress = address
        self.reads = list(reads)
        self.written = []

    def read(self, size, timeout):
        if self.reads:
            item = self.reads.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        time.sleep(timeout / 1000.0)
        raise usb.core.USBTimeoutError('Operation timed out')

    def write(self, data, timeout):
        self.written.append(bytes(data))
        return len(data)


def make_device(endpoints):
    dev = mock.Mock()
    cfg = mock.MagicMock()
    cfg.__getitem__.return_value = list(endpoints)
    dev.get_active_configuration.return_value = cfg
    return dev


def drain(listener):
    events = []
    while True:
        event = listener.next_event(2.0)
        if event is None:
            break
        events.append(event)
        if event[0] == 'end':
            break
    return events


class TransportTest(unittest.TestCase):

    @mock.patch('usb.core.find')
    def test_find_device(self, mock_find):
        dev = mock.Mock()
        mock_find.return_value = dev
        handle = usbio.PyUSBTransport().find_device(0x0483, 0x5750)
        mock_find.assert_called_once_with(idVendor=0x0483, idProduct=0x5750)
        self.assertIs(handle.device, dev)
        self.assertEqual(handle.interface, 0)

    @mock.patch('usb.core.find', return_value=None)
    def test_no_device(self, mock_find):
        self.assertIsNone(usbio.PyUSBTransport().find_device(0x0483, 0x5750))

    @mock.patch('usb.core.find', side_effect=usb.core.NoBackendError('No backend available'))
    def test_no_backend(self, mock_find):
        self.assertRaises(usb.core.USBError,
                          usbio.PyUSBTransport().find_device, 0x0483, 0x5750)
        # A session reports it as a transport failure
        session = Session(transport=usbio.PyUSBTransport())
        self.assertRaises(ws3000.TransportError, session.query)
        self.assertEqual(session.state, SessionState.ERROR)


class HandleTest(unittest.TestCase):

    def setUp(self):
        self.ep_in = FakeEndpoint(0x82)
        self.ep_out = FakeEndpoint(0x01)
        self.dev = make_device([self.ep_in, self.ep_out])
        self.handle = usbio.PyUSBHandle(self.dev)

    def test_open_finds_endpoints(self):
        self.handle.open()
        self.assertIs(self.handle.ep_in, self.ep_in)
        self.assertIs(self.handle.ep_out, self.ep_out)
        self.dev.set_configuration.assert_not_called()

    def test_open_configures_unconfigured_device(self):
        cfg = self.dev.get_active_configuration.return_value
        self.dev.get_active_configuration.side_effect = [usb.core.USBError('not configured'),
                                                         cfg]
        self.handle.open()
        self.dev.set_configuration.assert_called_once_with()
        self.assertIs(self.handle.ep_in, self.ep_in)

    def test_open_without_out_endpoint(self):
        handle = usbio.PyUSBHandle(make_device([self.ep_in]))
        self.assertRaises(usb.core.USBError, handle.open)

    def test_kernel_driver(self):
        self.dev.is_kernel_driver_active.return_value = True
        self.assertTrue(self.handle.is_kernel_driver_active())
        self.dev.is_kernel_driver_active.assert_called_once_with(0)
        self.handle.detach_kernel_driver()
        self.dev.detach_kernel_driver.assert_called_once_with(0)
        self.handle.attach_kernel_driver()
        self.dev.attach_kernel_driver.assert_called_once_with(0)

    def test_kernel_driver_not_supported(self):
        self.dev.is_kernel_driver_active.side_effect = NotImplementedError
        self.assertFalse(self.handle.is_kernel_driver_active())

    @mock.patch.object(usb.util, 'dispose_resources')
    @mock.patch.object(usb.util, 'release_interface')
    @mock.patch.object(usb.util, 'claim_interface')
    def test_claim_release_close(self, mock_claim, mock_release, mock_dispose):
        self.handle.claim_interface()
        mock_claim.assert_called_once_with(self.dev, 0)
        self.handle.release_interface()
        mock_release.assert_called_once_with(self.dev, 0)
        self.handle.close()
        mock_dispose.assert_called_once_with(self.dev)

    def test_transmit(self):
        self.handle.open()
        self.assertEqual(self.handle.transmit(b'\x7b\x03\x40\x7d'), 4)
        self.assertEqual(self.ep_out.written, [b'\x7b\x03\x40\x7d'])

    def test_short_write(self):
        self.handle.open()
        self.ep_out.write = mock.Mock(return_value=2)
        self.assertRaises(usb.core.USBError, self.handle.transmit, b'\x7b\x03\x40\x7d')

    def test_listen(self):
        response = make_response([(0x00, 215, 45)])
        self.ep_in.reads = [usb.core.USBTimeoutError('Operation timed out'), response]
        self.handle.open()
        listener = self.handle.start_listening(64)
        try:
            self.assertEqual(listener.next_event(2.0), ('data', response))
        finally:
            self.handle.stop_listening()
        self.assertFalse(listener.is_alive())
        self.assertIsNone(self.handle.listener)
        self.assertEqual(drain(listener), [('end', None)])

    def test_stop_listening_when_idle(self):
        self.handle.stop_listening()


class ListenerTest(unittest.TestCase):

    def test_error_ends_poll(self):
        error = usb.core.USBError('Pipe error')
        listener = usbio.InterruptListener(FakeEndpoint(0x82, [error]), 64, poll_timeout=10)
        listener.start()
        self.assertEqual(drain(listener), [('error', error), ('end', None)])
        listener.join(2.0)
        self.assertFalse(listener.is_alive())

    def test_nothing_arrives(self):
        listener = usbio.InterruptListener(FakeEndpoint(0x82), 64, poll_timeout=10)
        listener.start()
        try:
            self.assertIsNone(listener.next_event(0.05))
        finally:
            listener.stop()
        self.assertEqual(drain(listener), [('end', None)])

    def test_empty_reads_are_skipped(self):
        response = make_response([])
        listener = usbio.InterruptListener(FakeEndpoint(0x82, [b'', response]), 64,
                                           poll_timeout=10)
        listener.start()
        try:
            self.assertEqual(listener.next_event(2.0), ('data', response))
        finally:
            listener.stop()


if __name__ == '__main__':
    unittest.main()
