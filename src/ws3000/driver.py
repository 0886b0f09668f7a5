#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Driver for the Ambient Weather WS-3000 base station.

The WS-3000 receives up to eight wireless temperature/humidity sensors
and reports them over USB (vendor 0x0483, product 0x5750). The station
keeps no history that this driver reads, so it only produces loop packets:
it polls the station every poll_interval seconds, one query at a time.

Channel numbers are one-based, as printed on the sensors. Packet labels
follow that: channel 1 reports as temperature_1, humidity_1, and so on.
"""

import argparse
import logging
import sys
import time

import configobj

import ws3000
import ws3000.logger
from ws3000 import frames
from ws3000 import wxformulas
from ws3000.readings import channel_label
from ws3000.session import Session, VENDOR_ID, PRODUCT_ID, DEFAULT_TIMEOUT
from ws3000.util import read_config, to_bool, to_float, to_int

log = logging.getLogger(__name__)

DRIVER_NAME = 'WS3000'
DRIVER_VERSION = ws3000.__version__


def loader(config_dict, engine):  # @UnusedVariable
    stn_dict = dict(config_dict[DRIVER_NAME])
    # A top-level debug turns on debugging for the whole process
    stn_dict.setdefault('debug', to_bool(config_dict.get('debug', 0)))
    return WS3000Driver(**stn_dict)


def confeditor_loader():
    return WS3000ConfEditor()


class AbstractDevice(object):
    """Device drivers should inherit from this class."""

    @property
    def hardware_name(self):
        raise NotImplementedError("Property 'hardware_name' not implemented")

    def genLoopPackets(self):
        raise NotImplementedError("Method 'genLoopPackets' not implemented")

    def closePort(self):
        pass


class WS3000Driver(AbstractDevice):
    """Driver for the WS-3000 station."""

    DEFAULT_MAP = {
        'outTemp': 'temperature_1',
        'outHumidity': 'humidity_1',
        'extraTemp1': 'temperature_2',
        'extraTemp2': 'temperature_3',
        'extraTemp3': 'temperature_4',
        'extraTemp4': 'temperature_5',
        'extraTemp5': 'temperature_6',
        'extraTemp6': 'temperature_7',
        'extraTemp7': 'temperature_8',
        'extraHumid1': 'humidity_2',
        'extraHumid2': 'humidity_3',
        'extraHumid3': 'humidity_4',
        'extraHumid4': 'humidity_5',
        'extraHumid5': 'humidity_6',
        'extraHumid6': 'humidity_7',
        'extraHumid7': 'humidity_8'}

    def __init__(self, **stn_dict):
        """Initialize an object of type WS3000Driver.

        NAMED ARGUMENTS:

        model: Which station model is this?
        [Optional. Default is 'WS-3000']

        poll_interval: How often to query the station, in seconds.
        [Optional. Default is 60]

        timeout: How long to wait, in seconds, for the station to answer.
        [Optional. Default is 5 seconds]

        max_tries: How many times to try a query before giving up.
        [Optional. Default is 3]

        retry_wait: How long to wait, in seconds, before retrying.
        [Optional. Default is 5 seconds]

        vendor_id, product_id: USB identifiers of the station.
        [Optional. Default is 0x0483, 0x5750]

        interface: The USB interface
        [Optional. Default is 0]

        sensor_map: Observation name to raw label, merged over DEFAULT_MAP.

        debug: Log every frame in hex.
        [Optional. Default is False]
        """
        log.info('driver version is %s', DRIVER_VERSION)
        self.model = stn_dict.get('model', 'WS-3000')
        self.poll_interval = to_float(stn_dict.get('poll_interval', 60))
        self.timeout = to_float(stn_dict.get('timeout', DEFAULT_TIMEOUT))
        self.max_tries = to_int(stn_dict.get('max_tries', 3))
        self.retry_wait = to_float(stn_dict.get('retry_wait', 5))
        self.vendor_id = to_int(stn_dict.get('vendor_id', VENDOR_ID))
        self.product_id = to_int(stn_dict.get('product_id', PRODUCT_ID))
        self.interface = to_int(stn_dict.get('interface', 0))
        self.debug = to_bool(stn_dict.get('debug', False))
        self.transport = stn_dict.get('transport')
        self.sensor_map = dict(self.DEFAULT_MAP)
        if 'sensor_map' in stn_dict:
            self.sensor_map.update(stn_dict['sensor_map'])
        log.info('poll interval is %s', self.poll_interval)
        log.info('sensor map is %s', self.sensor_map)

    @property
    def hardware_name(self):
        return self.model

    def new_session(self):
        return Session(transport=self.transport,
                       vendor_id=self.vendor_id,
                       product_id=self.product_id,
                       interface=self.interface,
                       timeout=self.timeout,
                       debug=self.debug)

    def genLoopPackets(self):
        """Generator function that continuously returns loop packets"""
        while True:
            channels = self.get_readings()
            packet = self.data_to_packet(channels, self.sensor_map)
            if self.debug:
                log.debug('packet: %s', packet)
            yield packet
            time.sleep(self.poll_interval)

    def get_readings(self):
        """Query the station, trying up to max_tries times with a fresh
        session each time."""
        for count in range(self.max_tries):
            try:
                return self.new_session().query()
            except ws3000.WS3000IOError as e:
                log.error('Failed attempt %d of %d to query station: %s',
                          count + 1, self.max_tries, e)
                if count + 1 < self.max_tries:
                    time.sleep(self.retry_wait)
        msg = 'Max retries (%d) exceeded for readings' % self.max_tries
        log.error(msg)
        raise ws3000.RetriesExceeded(msg)

    @staticmethod
    def data_to_packet(channels, sensor_map):
        """Map a list of ChannelReading to a metric loop packet.

        Only active channels contribute observations.
        """
        raw = dict()
        date_time = None
        for idx, reading in enumerate(channels):
            date_time = reading.dateTime
            if not reading.active:
                continue
            ch = idx + 1
            raw['temperature_%d' % ch] = reading.temperatureC
            raw['humidity_%d' % ch] = reading.humidity
            raw['dewpoint_%d' % ch] = reading.dewpointC
            raw['heatindex_%d' % ch] = wxformulas.FtoC(reading.heatindexF)
        packet = {'dateTime': date_time if date_time is not None else int(time.time() + 0.5),
                  'usUnits': ws3000.METRIC}
        for obs, label in sensor_map.items():
            if label in raw:
                packet[obs] = raw[label]
        return packet


class WS3000ConfEditor(object):
    @property
    def default_stanza(self):
        return """
[WS3000]
    # This section is for the Ambient Weather WS-3000 base station.

    # The driver to use
    driver = ws3000.driver

    # The station model
    model = WS-3000

    # How often to query the station, in seconds
    poll_interval = 60

    # How long to wait for the station to answer, in seconds
    timeout = 5

    # How many times to try a query, and how long to wait between tries
    max_tries = 3
    retry_wait = 5
"""

    def get_conf(self, orig_stanza=None):
        return self.default_stanza if orig_stanza is None else orig_stanza


def print_readings(channels, out=None):
    """Print one line per active channel, then the count of active channels."""
    if out is None:
        out = sys.stdout
    total = 0
    for idx, reading in enumerate(channels):
        if not reading.active:
            continue
        total += 1
        print("%s: %.1fC %.1fF %d%% heatindex %.1fF dewpoint %.1fC %.1fF"
              % (channel_label(idx), reading.temperatureC, reading.temperatureF,
                 reading.humidity, reading.heatindexF, reading.dewpointC,
                 reading.dewpointF), file=out)
    print("%d active channel%s" % (total, '' if total == 1 else 's'), file=out)
    return total


def main(args=None):
    parser = argparse.ArgumentParser(prog='ws3000',
                                     description="Query an Ambient Weather WS-3000 "
                                                 "base station once and print its channels.")
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + DRIVER_VERSION)
    parser.add_argument('--debug', action='store_true',
                        help='display diagnostic information while running')
    parser.add_argument('--config', metavar='FILE',
                        help='read the [WS3000] section of this configuration file')
    parser.add_argument('--timeout', type=float, metavar='SECONDS',
                        help='how long to wait for the station to answer')
    parser.add_argument('--raw', action='store_true',
                        help='print the raw response frame in hex')
    options = parser.parse_args(args)

    config_dict = {}
    if options.config:
        try:
            _, config_dict = read_config(options.config)
        except (IOError, configobj.ConfigObjError) as e:
            print("Unable to read configuration file %s: %s" % (options.config, e),
                  file=sys.stderr)
            return ws3000.CONFIG_ERROR
    stn_dict = dict(config_dict.get(DRIVER_NAME, {}))
    if options.debug:
        config_dict['debug'] = 1
        stn_dict['debug'] = True
    else:
        stn_dict.setdefault('debug', to_bool(config_dict.get('debug', 0)))
    if options.timeout is not None:
        stn_dict['timeout'] = options.timeout

    ws3000.logger.setup('ws3000', config_dict)

    driver = WS3000Driver(**stn_dict)
    try:
        if options.raw:
            data = driver.new_session().request(frames.CMD_TEMP_HUMID)
            print(frames.fmt_bytes(data))
        else:
            print_readings(driver.new_session().query())
    except ws3000.WS3000IOError as e:
        print("Query failed: %s" % e, file=sys.stderr)
        return ws3000.IO_ERROR
    return 0


if __name__ == '__main__':
    sys.exit(main())
