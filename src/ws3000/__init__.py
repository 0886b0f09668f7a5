#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Package ws3000, for querying an Ambient Weather WS-3000 base station over USB.

The base station multiplexes up to eight wireless temperature/humidity
sensors. One query claims the station's USB interface, sends a single
request frame, collects the single response frame and decodes it into eight
per-channel readings.
"""
import logging

__version__ = "1.0.0"

# Exit return codes
CONFIG_ERROR = 3
IO_ERROR = 4

# Unit system of the loop packets
METRIC = 0x10

logging.getLogger(__name__).addHandler(logging.NullHandler())


# =============================================================================
#           Define possible exceptions that could get thrown.
# =============================================================================

class WS3000IOError(IOError):
    """Base class of exceptions thrown when encountering an input/output error
    with the base station."""


class DeviceNotFound(WS3000IOError):
    """Exception thrown when no device with the station's vendor and product
    identifiers is on the bus."""


class AccessDenied(WS3000IOError):
    """Exception thrown when the device cannot be opened or its interface
    cannot be claimed, for example because another process holds it."""


class SessionBusy(AccessDenied):
    """Exception thrown when a query is started on a session that already
    has one in flight."""


class TransportError(WS3000IOError):
    """Exception thrown when the USB layer fails to send or receive."""


class Timeout(WS3000IOError):
    """Exception thrown when the station does not answer in time."""


class MalformedResponse(WS3000IOError):
    """Exception thrown when a response frame has a bad header byte or is too
    short to hold all channels."""


class RetriesExceeded(WS3000IOError):
    """Exception thrown when max retries exceeded."""


def query(**kwargs):
    """Run one query against the base station and return its eight readings.

    Keyword arguments are passed on to ws3000.session.Session.
    """
    from ws3000.session import Session
    return Session(**kwargs).query()
