#!/usr/bin/env python
import os

from setuptools import setup

here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'README.md'), "r", encoding="utf-8") as f:
    README = f.read()

setup(name='wikiconnect',
      # Keep in sync with __version__ in wikiconnect/client.py
      version='1.0.0',
      description='Authentication and request core for the MediaWiki Action API',
      long_description=README,
      long_description_content_type='text/markdown',
      classifiers=[
          'Programming Language :: Python',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Programming Language :: Python :: 3.10',
          'Programming Language :: Python :: 3.11',
          'Programming Language :: Python :: 3.12',
      ],
      keywords='mediawiki wikipedia api oauth',
      license='MIT',
      packages=['wikiconnect'],
      python_requires='>=3.8',
      install_requires=['requests', 'requests-oauthlib'],
      extras_require={
          'testing': ['pytest', 'pytest-cov',
                      'responses>=0.3.0', 'responses!=0.6.0'],
      },
      zip_safe=True
      )
