#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Set up logging for applications using ws3000.

The library itself only logs to its own loggers. An application calls
setup() once to decide where those messages go. The defaults below can be
overridden by a [Logging] section in the configuration dictionary, which
uses the layout of logging.config.dictConfig.
"""

import io
import logging.config
import sys

import configobj

from ws3000.util import to_bool, to_int

LOGGING_STR = """[Logging]
    version = 1
    disable_existing_loggers = False

    # Root logger
    [[root]]
      level = {log_level}
      handlers = console,

    # Additional loggers would go in the following section. This is useful for tailoring logging
    # for individual modules.
    [[loggers]]
        [[[usb]]]
            level = {usb_level}
            propagate = True

    # Definitions of possible logging destinations
    [[handlers]]

        # System logger
        [[[syslog]]]
            level = DEBUG
            formatter = standard
            class = logging.handlers.SysLogHandler
            address = {address}
            facility = {facility}

        # Log to console
        [[[console]]]
            level = DEBUG
            formatter = {console_formatter}
            class = logging.StreamHandler
            # Alternate choice is 'ext://sys.stderr'
            stream = ext://sys.stdout

    # How to format log messages
    [[formatters]]
        [[[simple]]]
            format = "%(levelname)s %(message)s"
        [[[standard]]]
            format = "{process_name}[%(process)d] %(levelname)s %(name)s: %(message)s"
        [[[verbose]]]
            format = "[%(asctime)s.%(msecs)03d] {process_name}[%(process)d] %(levelname)s %(name)s: %(message)s"
            # Format to use for dates and times:
            datefmt = %H:%M:%S
"""

# These values are known only at runtime
if sys.platform == "darwin":
    address = '/var/run/syslog'
    facility = 'local1'
elif sys.platform.startswith('linux'):
    address = '/dev/log'
    facility = 'user'
elif sys.platform.startswith('freebsd'):
    address = '/var/run/log'
    facility = 'user'
elif sys.platform.startswith('netbsd'):
    address = '/var/run/log'
    facility = 'user'
elif sys.platform.startswith('openbsd'):
    address = '/dev/log'
    facility = 'user'
else:
    address = ('localhost', 514)
    facility = 'user'


def setup(process_name, config_dict=None, handlers=('console',)):
    """Customize logging.

    process_name: The name that appears in each log line.

    config_dict: The configuration dictionary. Its 'debug' option lowers the
    level to DEBUG, switches the console to time-stamped output, and turns on
    pyusb's own logging. Its [Logging] section, if any, is merged over the
    defaults. Placeholders such as {process_name} and {log_level} are filled
    in wherever they appear, in the defaults or in the user's section.

    handlers: The names of the handlers the root logger uses, unless the
    [Logging] section names its own.
    """
    config_dict = config_dict or {}
    debug = to_int(config_dict.get('debug', 0)) or 0

    log_config = configobj.ConfigObj(io.StringIO(LOGGING_STR), interpolation=False,
                                     encoding='utf-8')
    log_config['Logging']['root']['handlers'] = list(handlers)
    if 'Logging' in config_dict:
        log_config.merge({'Logging': config_dict['Logging']})

    values = {'log_level': 'DEBUG' if debug else 'INFO',
              'usb_level': 'DEBUG' if debug else 'WARNING',
              'address': address,
              'facility': facility,
              'console_formatter': 'verbose' if debug else 'simple',
              'process_name': process_name}

    def _fix(section, key):
        value = section[key]
        if isinstance(value, (list, tuple)):
            section[key] = [item.format(**values) if isinstance(item, str) else item
                            for item in value]
        elif isinstance(value, str):
            section[key] = value.format(**values)

    log_config['Logging'].walk(_fix)

    log_dict = _to_dict_config(log_config['Logging'])
    logging.config.dictConfig(log_dict)
    return log_dict


def _to_dict_config(section):
    """configobj hands back every value as a string. Convert the few that
    dictConfig needs as something else."""
    log_dict = section.dict()
    log_dict['version'] = to_int(log_dict.get('version', 1))
    log_dict['disable_existing_loggers'] = to_bool(log_dict.get('disable_existing_loggers',
                                                                False))
    for logger_dict in log_dict.get('loggers', {}).values():
        if 'propagate' in logger_dict:
            logger_dict['propagate'] = to_bool(logger_dict['propagate'])
    return log_dict
