#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Encoding of request frames and decoding of response frames.

A request is four bytes:

    7B <command> 40 7D

The command byte is the only one that changes. 0x03 asks for the
temperature/humidity telemetry. Other values exist in the station's command
space but are undocumented, so they are passed through untouched.

A response is up to 64 bytes. Byte 0 is 0x7B. Bytes 1..24 hold eight
3-byte slots, one per channel, in channel order:

    range indicator, magnitude, humidity

The range indicator selects the temperature band of the magnitude byte and
doubles as the channel's activity flag:

    0x00  positive range, 0 to 25.6C
    0x01  high range, 25.6 to 51.2C
    0xFF  negative range, -25.6 to 0C
    0x7F  channel inactive
"""

import collections

import ws3000

FRAME_START = 0x7B
FRAME_PAD = 0x40
FRAME_END = 0x7D

CMD_TEMP_HUMID = 0x03
# Seen in the command space, never decoded:
#   0x04, 0x05, 0x06, 0x08, 0x09, 0x41

# Range indicators. The positive range (0x00) needs no adjustment.
SENSOR_HIGH = 0x01
SENSOR_NEGATIVE = 0xFF
SENSOR_INACTIVE = 0x7F

NUM_CHANNELS = 8
SLOT_SIZE = 3
RESPONSE_SIZE = 64
MIN_RESPONSE_SIZE = 1 + NUM_CHANNELS * SLOT_SIZE

# One decoded 3-byte slot of a response frame
ChannelRaw = collections.namedtuple('ChannelRaw',
                                    ['range_indicator', 'magnitude', 'humidity_raw'])


def encode_request(command):
    """Build the request frame for a one-byte command.

    >>> encode_request(CMD_TEMP_HUMID)
    b'{\\x03@}'
    """
    if not 0 <= command <= 0xFF:
        raise ValueError("Command 0x%x does not fit in a byte" % command)
    return bytes([FRAME_START, command, FRAME_PAD, FRAME_END])


def decode_request_command(frame):
    """Return the command byte of a request frame."""
    frame = bytes(frame)
    if len(frame) != 4 or frame[0] != FRAME_START or frame[2] != FRAME_PAD \
            or frame[3] != FRAME_END:
        raise ValueError("Not a request frame: %s" % fmt_bytes(frame))
    return frame[1]


def decode_response(data):
    """Split a response frame into its eight channel slots.

    data: The raw response, as bytes or a sequence of ints.

    Returns: A list of NUM_CHANNELS ChannelRaw, index 0 being channel 1.

    Raises ws3000.MalformedResponse if the frame is empty, does not start with
    FRAME_START, or is too short to hold every slot.
    """
    data = bytes(data)
    if not data:
        raise ws3000.MalformedResponse("Empty response")
    if data[0] != FRAME_START:
        raise ws3000.MalformedResponse("Did not understand response: header byte 0x%02x"
                                       % data[0])
    if len(data) < MIN_RESPONSE_SIZE:
        raise ws3000.MalformedResponse("Short response: %d bytes, need %d"
                                       % (len(data), MIN_RESPONSE_SIZE))
    channels = []
    for x in range(NUM_CHANNELS):
        pos = x * SLOT_SIZE
        channels.append(ChannelRaw(data[pos + 1], data[pos + 2], data[pos + 3]))
    return channels


def fmt_bytes(buf, per_line=16):
    """Format a buffer as rows of upper case hex byte pairs."""
    if not buf:
        return ''
    pairs = ["%02X" % x for x in bytearray(buf)]
    return '\n'.join(' '.join(pairs[i:i + per_line])
                     for i in range(0, len(pairs), per_line))
