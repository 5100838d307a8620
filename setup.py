#!/usr/bin/env python
from setuptools import setup

setup(name='gcalmenu',
      version='1.0.0',
      maintainer='gcalmenu contributors',
      description='Menu driven Google Calendar client for the terminal',
      license='MIT',
      packages=['gcalmenu'],
      install_requires=[
          'python-dateutil',
          'python-gflags',
          'httplib2',
          'google-api-python-client>=2.0',
          'oauth2client'
      ],
      extras_require={
          'test': ["pytest"],
      },
      entry_points={
          'console_scripts':
              ['gcalmenu=gcalmenu.cli:main'],
      },
      classifiers=[
          "Development Status :: 5 - Production/Stable",
          "Environment :: Console",
          "Intended Audience :: End Users/Desktop",
          "License :: OSI Approved :: MIT License",
          "Programming Language :: Python :: 3",
      ])
