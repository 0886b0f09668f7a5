#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Assemble decoded channel slots into per-channel readings.

Channels are indexed from zero internally. Channel numbers shown to people
(and used in packet labels) are one-based: index 0 is channel 1.
"""

import collections

from ws3000 import wxformulas
from ws3000.frames import SENSOR_INACTIVE

ChannelReading = collections.namedtuple('ChannelReading',
                                        ['active',
                                         'temperatureC',
                                         'temperatureF',
                                         'humidity',
                                         'heatindexF',
                                         'dewpointC',
                                         'dewpointF',
                                         'dateTime'])


def assemble(raw, now):
    """Turn one ChannelRaw into a ChannelReading.

    A channel is inactive when its range indicator is SENSOR_INACTIVE. All
    measured fields of an inactive channel are None, whatever its other bytes
    hold.

    now: The capture time of the response, in unix epoch seconds.
    """
    if raw.range_indicator == SENSOR_INACTIVE:
        return ChannelReading(False, None, None, None, None, None, None, now)

    temperatureC = wxformulas.decode_temperatureC(raw.magnitude, raw.range_indicator)
    humidity = raw.humidity_raw
    temperatureF = wxformulas.CtoF(temperatureC)
    dewpointC = wxformulas.dewpointC(temperatureC, humidity)
    return ChannelReading(active=True,
                          temperatureC=temperatureC,
                          temperatureF=temperatureF,
                          humidity=humidity,
                          heatindexF=wxformulas.heatindexF(temperatureF, humidity),
                          dewpointC=dewpointC,
                          dewpointF=wxformulas.CtoF(dewpointC),
                          dateTime=now)


def assemble_all(channels, now):
    """Assemble every slot of a decoded response, keeping channel order."""
    return [assemble(raw, now) for raw in channels]


def channel_label(index):
    """Return the label a person would use for the channel at a zero-based index."""
    return "channel %d" % (index + 1)
