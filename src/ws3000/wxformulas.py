#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#

"""Temperature decoding and weather related formulas.

All results are rounded to one decimal place, half away from zero, which is
how the base station's own display rounds.
"""

import decimal
import math

from ws3000.frames import SENSOR_HIGH, SENSOR_NEGATIVE

# Width of each of the three temperature bands, in degrees Celsius
RANGE_SPAN = 25.6

_ONE_PLACE = decimal.Decimal('0.1')


def round1(x):
    """Round to one decimal place, half away from zero.

    >>> print(round1(0.25))
    0.3
    >>> print(round1(-0.25))
    -0.3
    >>> print(round1(78.80000000000001))
    78.8
    """
    if x is None:
        return None
    return float(decimal.Decimal(repr(x)).quantize(_ONE_PLACE, rounding=decimal.ROUND_HALF_UP))


def decode_temperatureC(magnitude, range_indicator):
    """Decode a channel's temperature.

    magnitude: The magnitude byte, in tenths of a degree within its band.

    range_indicator: The band the magnitude belongs to. In the negative band
    the magnitude counts down from 25.6C.

    Returns: Temperature in Celsius

    >>> print(decode_temperatureC(215, 0x00))
    21.5
    >>> print(decode_temperatureC(10, 0xFF))
    -24.6
    >>> print(decode_temperatureC(10, 0x01))
    26.6
    """
    c = magnitude / 10.0
    if range_indicator == SENSOR_NEGATIVE:
        c = -(RANGE_SPAN - c)
    elif range_indicator == SENSOR_HIGH:
        c += RANGE_SPAN
    return round1(c)


def CtoF(c):
    """Convert Celsius to Fahrenheit.

    >>> print(CtoF(26.0))
    78.8
    """
    if c is None:
        return None
    return round1(c * 1.8 + 32.0)


def FtoC(f):
    """Convert Fahrenheit to Celsius.

    >>> print(FtoC(129.5))
    54.2
    """
    if f is None:
        return None
    return round1((f - 32.0) / 1.8)


def heatindexF(T, R):
    """Calculate heat index.

    Uses the Rothfusz regression of the NOAA:
    https://www.wpc.ncep.noaa.gov/html/heatindex_equation.shtml

    T: Temperature in Fahrenheit

    R: Relative humidity in percent

    Returns heat index in Fahrenheit

    >>> print(heatindexF(78.8, 50))
    78.7
    >>> print(heatindexF(89.6, 100))
    129.5
    """
    if T is None or R is None:
        return None

    if T >= 80.0:
        hi_F = -42.379 \
               + 2.04901523 * T \
               + 10.14333127 * R \
               - 0.22475541 * T * R \
               - 6.83783e-3 * T ** 2 \
               - 5.481717e-2 * R ** 2 \
               + 1.22874e-3 * T ** 2 * R \
               + 8.5282e-4 * T * R ** 2 \
               - 1.99e-6 * T ** 2 * R ** 2
        # Apply an adjustment for low humidities
        if R < 13 and 80 <= T <= 112:
            hi_F -= ((13 - R) / 4.0) * math.sqrt((17 - abs(T - 95.0)) / 17.0)
        # Apply an adjustment for high humidities
        elif R > 85 and 80 <= T <= 87:
            hi_F += ((R - 85) / 10.0) * ((87 - T) / 5.0)
    else:
        # Simplified formula for cooler air
        hi_F = 0.5 * (T + 61.0 + ((T - 68.0) * 1.2) + (R * 0.094))

    return round1(hi_F)


def dewpointC(T, R):
    """Calculate dew point.
    https://iridl.ldeo.columbia.edu/dochelp/QA/Basic/dewpoint.html

    T: Temperature in Celsius

    R: Relative humidity in percent.

    Returns: Dewpoint in Celsius

    >>> print(dewpointC(26.0, 50))
    14.8
    >>> print(dewpointC(32.0, 100))
    32.0
    """
    if T is None or R is None:
        return None
    dryness = 1.0 - 0.01 * R
    TdC = T \
        - (14.55 + 0.114 * T) * dryness \
        - ((2.5 + 0.007 * T) * dryness) ** 3 \
        - (15.9 + 0.117 * T) * dryness ** 14
    return round1(TdC)
