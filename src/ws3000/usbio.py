#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""USB access to the base station, built on pyusb.

The session only needs a small set of operations: find the device, open
it, manage the kernel driver and the interface claim, listen on the
interrupt IN endpoint and write to the OUT endpoint. This module provides
them for real hardware. Every failure surfaces as usb.core.USBError, which
is an IOError.
"""

import logging
import queue
import threading

import usb.core
import usb.util

log = logging.getLogger(__name__)

# How long each interrupt read waits before checking for a stop request, in ms
POLL_TIMEOUT = 100


class PyUSBTransport(object):
    """Finds base stations on the USB bus."""

    def __init__(self, interface=0):
        self.interface = interface

    def find_device(self, vendor_id, product_id):
        try:
            dev = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        except usb.core.NoBackendError as e:
            # NoBackendError is a ValueError; report it like any other USB failure
            raise usb.core.USBError("No USB backend available: %s" % e)
        if dev is None:
            return None
        log.debug("Found device 0x%04x:0x%04x on bus %s address %s",
                  vendor_id, product_id, dev.bus, dev.address)
        return PyUSBHandle(dev, self.interface)


class PyUSBHandle(object):
    """One base station, as seen through pyusb."""

    def __init__(self, device, interface=0, write_timeout=1000):
        self.device = device
        self.interface = interface
        self.write_timeout = write_timeout
        self.ep_in = None
        self.ep_out = None
        self.listener = None

    def open(self):
        """Locate the interface and its endpoints, configuring the device if needed."""
        try:
            cfg = self.device.get_active_configuration()
        except usb.core.USBError:
            self.device.set_configuration()
            cfg = self.device.get_active_configuration()
        intf = cfg[(self.interface, 0)]
        self.ep_in = usb.util.find_descriptor(
            intf, custom_match=lambda e:
            usb.util.endpoint_direction(e.bEndpointAddress) == usb.util.ENDPOINT_IN)
        self.ep_out = usb.util.find_descriptor(
            intf, custom_match=lambda e:
            usb.util.endpoint_direction(e.bEndpointAddress) == usb.util.ENDPOINT_OUT)
        if self.ep_in is None or self.ep_out is None:
            raise usb.core.USBError("Interface %d lacks an IN or OUT endpoint" % self.interface)
        log.debug("endpoints in=0x%02x out=0x%02x",
                  self.ep_in.bEndpointAddress, self.ep_out.bEndpointAddress)

    def is_kernel_driver_active(self):
        try:
            return self.device.is_kernel_driver_active(self.interface)
        except NotImplementedError:
            # Not all backends know about kernel drivers
            return False

    def detach_kernel_driver(self):
        self.device.detach_kernel_driver(self.interface)

    def attach_kernel_driver(self):
        self.device.attach_kernel_driver(self.interface)

    def claim_interface(self):
        usb.util.claim_interface(self.device, self.interface)

    def release_interface(self):
        usb.util.release_interface(self.device, self.interface)

    def close(self):
        usb.util.dispose_resources(self.device)

    def start_listening(self, size):
        """Start polling the IN endpoint. Returns the InterruptListener."""
        self.listener = InterruptListener(self.ep_in, size)
        self.listener.start()
        return self.listener

    def stop_listening(self):
        if self.listener is not None:
            self.listener.stop()
            self.listener = None

    def transmit(self, data):
        n = self.ep_out.write(data, self.write_timeout)
        if n != len(data):
            raise usb.core.USBError("Short write: %d of %d bytes" % (n, len(data)))
        return n


class InterruptListener(threading.Thread):
    """Polls an interrupt IN endpoint, reporting what happens as events.

    Events are tuples: ('data', bytes), ('error', exception), or
    ('end', None). An 'error' event ends the poll. An 'end' event is always
    the last one.
    """

    def __init__(self, endpoint, size, poll_timeout=POLL_TIMEOUT):
        super().__init__(name='ws3000-listener', daemon=True)
        self.endpoint = endpoint
        self.size = size
        self.poll_timeout = poll_timeout
        self.events = queue.Queue()
        self._stop_event = threading.Event()

    def run(self):
        try:
            while not self._stop_event.is_set():
                try:
                    data = self.endpoint.read(self.size, self.poll_timeout)
                except usb.core.USBTimeoutError:
                    continue
                except usb.core.USBError as e:
                    self.events.put(('error', e))
                    break
                if data:
                    self.events.put(('data', bytes(data)))
        finally:
            self.events.put(('end', None))

    def next_event(self, timeout):
        """Wait up to timeout seconds for the next event. Returns None if there was none."""
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def stop(self, timeout=1.0):
        self._stop_event.set()
        if self.is_alive() and self is not threading.current_thread():
            self.join(timeout)
