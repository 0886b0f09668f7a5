#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""One query against the base station.

A query walks through these states:

    idle -> opening -> claimed -> requesting -> awaiting_response
         -> decoding -> releasing -> done

Any failure moves the session to 'error' once the interface has been
released. Release (and reattaching a kernel driver that was detached) runs
on every path, including a KeyboardInterrupt while waiting for the answer.
Nothing is retried here; a caller wanting another try starts a new query.
"""

import logging
import threading
import time

import ws3000
from ws3000 import frames
from ws3000 import readings

log = logging.getLogger(__name__)

VENDOR_ID = 0x0483
PRODUCT_ID = 0x5750

DEFAULT_TIMEOUT = 5.0


class SessionState(object):
    IDLE = 'idle'
    OPENING = 'opening'
    CLAIMED = 'claimed'
    REQUESTING = 'requesting'
    AWAITING_RESPONSE = 'awaiting_response'
    DECODING = 'decoding'
    RELEASING = 'releasing'
    DONE = 'done'
    ERROR = 'error'


class Session(object):
    """Talks to one base station, one query at a time."""

    def __init__(self, transport=None, vendor_id=VENDOR_ID, product_id=PRODUCT_ID,
                 interface=0, timeout=DEFAULT_TIMEOUT, debug=False, logger=None,
                 clock=time.time):
        """Initialize the session.

        transport: Finds the device. Default is a pyusb transport.

        vendor_id, product_id: USB identifiers of the base station.

        interface: The USB interface to claim.
        [Optional. Default is 0]

        timeout: How long to wait, in seconds, for the response frame.
        [Optional. Default is 5 seconds]

        debug: Log every frame in hex, and every state change.
        [Optional. Default is False]

        logger: The logging.Logger to use. Default is this module's logger.

        clock: Returns the capture time of a response, in unix epoch seconds.
        """
        if transport is None:
            from ws3000.usbio import PyUSBTransport
            transport = PyUSBTransport(interface)
        self.transport = transport
        self.vendor_id = vendor_id
        self.product_id = product_id
        self.timeout = timeout
        self.debug = debug
        self.log = logger if logger is not None else log
        self.clock = clock
        self.state = SessionState.IDLE
        self._lock = threading.Lock()

    def query(self):
        """Ask for temperature and humidity on all channels.

        Returns: A list of eight readings.ChannelReading, index 0 being
        channel 1.
        """
        return self._run(frames.CMD_TEMP_HUMID, self._decode)

    def request(self, command):
        """Send any command byte and return the raw response frame."""
        return self._run(command, self._check_header)

    def _run(self, command, handler):
        if not self._lock.acquire(blocking=False):
            raise ws3000.SessionBusy("A query is already in progress")
        try:
            self._set_state(SessionState.IDLE)
            handle = self._open()
            detached = self._claim(handle)
            failed = True
            try:
                data = self._exchange(handle, frames.encode_request(command))
                self._set_state(SessionState.DECODING)
                result = handler(data)
                failed = False
            finally:
                self._release(handle, detached, failed)
            self._set_state(SessionState.DONE)
            return result
        except BaseException:
            self._set_state(SessionState.ERROR)
            raise
        finally:
            self._lock.release()

    def _set_state(self, state):
        if self.debug:
            self.log.debug("state %s -> %s", self.state, state)
        self.state = state

    def _open(self):
        self._set_state(SessionState.OPENING)
        try:
            handle = self.transport.find_device(self.vendor_id, self.product_id)
        except IOError as e:
            raise ws3000.TransportError(e)
        if handle is None:
            self.log.error("Base station not found (0x%04x, 0x%04x)",
                           self.vendor_id, self.product_id)
            raise ws3000.DeviceNotFound("Base station not found (0x%04x, 0x%04x)"
                                        % (self.vendor_id, self.product_id))
        return handle

    def _claim(self, handle):
        """Open the device and claim its interface.

        Returns: True if a kernel driver had to be detached first.
        """
        detached = False
        try:
            handle.open()
            if handle.is_kernel_driver_active():
                handle.detach_kernel_driver()
                detached = True
                self.log.debug("Detached kernel driver")
            handle.claim_interface()
        except IOError as e:
            self.log.error("Unable to claim USB interface: %s", e)
            self._unclaimed(handle, detached)
            raise ws3000.AccessDenied(e)
        except BaseException:
            self._unclaimed(handle, detached)
            raise
        self._set_state(SessionState.CLAIMED)
        return detached

    def _unclaimed(self, handle, detached):
        # The interface was never claimed, so only undo the detach
        try:
            if detached:
                self._cleanup_step("reattach kernel driver", handle.attach_kernel_driver)
        finally:
            self._cleanup_step("close device", handle.close)

    def _exchange(self, handle, frame):
        """Send one request frame and wait for exactly one response frame."""
        self._set_state(SessionState.REQUESTING)
        # Listen before transmitting, so a quick reply is not missed.
        try:
            listener = handle.start_listening(frames.RESPONSE_SIZE)
        except IOError as e:
            raise ws3000.TransportError(e)
        try:
            if self.debug:
                self.log.debug("sent\n%s", frames.fmt_bytes(frame))
            try:
                handle.transmit(frame)
            except IOError as e:
                self.log.error("Send failed: %s", e)
                raise ws3000.TransportError(e)

            self._set_state(SessionState.AWAITING_RESPONSE)
            event = listener.next_event(self.timeout)
        finally:
            handle.stop_listening()

        if event is None:
            self.log.error("No response within %.1f seconds", self.timeout)
            raise ws3000.Timeout("No response within %.1f seconds" % self.timeout)
        kind, payload = event
        if kind == 'data':
            if self.debug:
                self.log.debug("received\n%s", frames.fmt_bytes(payload))
            return payload
        if kind == 'error':
            self.log.error("Receive failed: %s", payload)
            raise ws3000.TransportError(payload)
        raise ws3000.TransportError("Listening ended before a response arrived")

    def _check_header(self, data):
        if not data or bytearray(data)[0] != frames.FRAME_START:
            raise ws3000.MalformedResponse("Did not understand response")
        return data

    def _decode(self, data):
        try:
            channels = frames.decode_response(data)
        except ws3000.MalformedResponse as e:
            self.log.error("Did not understand response: %s", e)
            raise
        return readings.assemble_all(channels, int(self.clock() + 0.5))

    def _release(self, handle, detached, failed):
        """Give the interface back. Runs whatever happened before it."""
        self._set_state(SessionState.RELEASING)
        errors = []
        try:
            errors.append(self._cleanup_step("release interface", handle.release_interface))
        finally:
            try:
                if detached:
                    errors.append(self._cleanup_step("reattach kernel driver",
                                                     handle.attach_kernel_driver))
            finally:
                errors.append(self._cleanup_step("close device", handle.close))
        errors = [e for e in errors if e is not None]
        # An earlier failure is the one the caller hears about.
        if errors and not failed:
            raise ws3000.TransportError(errors[0])

    def _cleanup_step(self, what, func):
        try:
            func()
        except IOError as e:
            self.log.error("%s failed: %s", what, e)
            return e
        return None
