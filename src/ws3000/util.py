#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Utilities for reading configuration values"""

import os.path

import configobj


def to_bool(x):
    """Convert an object to boolean.

    Examples:
    >>> print(to_bool('TRUE'))
    True
    >>> print(to_bool(1))
    True
    >>> print(to_bool('no'))
    False
    >>> print(to_bool('Foo'))
    Traceback (most recent call last):
    ValueError: Unknown boolean specifier: 'Foo'.
    """
    try:
        if x.lower() in ('true', 'yes', 'y', 'on', '1'):
            return True
        elif x.lower() in ('false', 'no', 'n', 'off', '0'):
            return False
    except AttributeError:
        pass
    try:
        return bool(int(x))
    except (ValueError, TypeError):
        pass
    raise ValueError("Unknown boolean specifier: '%s'." % x)


def to_int(x):
    """Convert an object to an integer, unless it is None. Strings may use a
    0x prefix for hexadecimal.

    Examples:
    >>> print(to_int('123'))
    123
    >>> print(to_int('0x0483'))
    1155
    >>> print(to_int(-5.2))
    -5
    >>> print(to_int(None))
    None
    """
    if isinstance(x, str):
        if x.lower() == 'none' or x == '':
            return None
        try:
            return int(x, 0)
        except ValueError:
            # Perhaps it's a string, holding a floating point number?
            return int(float(x))
    return int(x) if x is not None else None


def to_float(x):
    """Convert an object to a float, unless it is None

    Examples:
    >>> print(to_float('12.3'))
    12.3
    >>> print(to_float(None))
    None
    """
    if isinstance(x, str) and x.lower() == 'none':
        x = None
    return float(x) if x is not None else None


def read_config(config_path):
    """Read a configuration file.

    Returns: A tuple (config_path, config_dict), where config_path is the
    absolute path of the file that was read.

    Raises IOError if the file cannot be opened, and
    configobj.ConfigObjError if it cannot be parsed.
    """
    config_path = os.path.abspath(config_path)
    config_dict = configobj.ConfigObj(config_path, file_error=True,
                                      encoding='utf-8', interpolation=False)
    return config_path, config_dict
