#!/usr/bin/env python
# -*- coding: utf8 -*-
# vim: ts=4 sw=4 et ai:

import pathlib
from setuptools import setup, find_packages

base = pathlib.Path(__file__).parent

README = (base / 'README.md').read_text()

setup(
      name='tinytftp',
      version='0.1.0',
      description='Lock-step TFTP client and server',
      long_description=README,
      long_description_content_type='text/markdown',
      packages=find_packages(exclude=['tests', 'tests.*']),
      entry_points={
          'console_scripts': [
              'tinytftp = tinytftp.cli.client:main',
              'tinytftpd = tinytftp.cli.server:main',
          ],
      },
      extras_require={
          'test': ['pytest'],
      },
      python_requires='>=3.6',
      classifiers=[
        'Programming Language :: Python :: 3.6',
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Environment :: No Input/Output (Daemon)',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Topic :: Internet',
        ]
      )
