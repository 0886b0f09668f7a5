#!/usr/bin/env python
#
#    ws3000 --- Query an Ambient Weather WS-3000 base station over USB
#
#    Copyright (c) 2009-2024 Tom Keffer <tkeffer@gmail.com>
#
#    See the file LICENSE.txt for your full rights.
#
"""Setup file for ws3000."""

import os.path
import re

from setuptools import setup

this_dir = os.path.abspath(os.path.dirname(__file__))


def get_version():
    """Read the version from the package, without importing it."""
    with open(os.path.join(this_dir, 'src', 'ws3000', '__init__.py')) as fd:
        for line in fd:
            match = re.match(r'__version__\s*=\s*"(.*)"', line)
            if match:
                return match.group(1)
    raise RuntimeError("Unable to find the version string")


if __name__ == "__main__":
    setup(name='ws3000',
          version=get_version(),
          description='Query an Ambient Weather WS-3000 base station over USB',
          long_description="ws3000 claims the USB interface of a WS-3000 base station, "
                           "asks for the telemetry of its eight temperature/humidity "
                           "channels, and decodes the answer into temperature, humidity, "
                           "heat index and dew point.",
          author='Tom Keffer',
          author_email='tkeffer@gmail.com',
          license='GPLv3',
          python_requires='>=3.7',
          package_dir={'': 'src'},
          packages=['ws3000'],
          install_requires=['pyusb>=1.2',
                            'configobj>=5.0'],
          extras_require={'test': ['pytest']},
          entry_points={
              'console_scripts': ['ws3000=ws3000.driver:main'],
          },
          )
