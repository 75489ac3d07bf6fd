#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from setuptools import setup


setup(
    name = 'couchdesign',
    version = '0.1',
    description = 'Design documents, views and replication for CouchDB',
    long_description = \
"""A Python library for CouchDB and Cloudant that keeps design documents in
line with local definitions, queries their views, triggers replications and
waits for eventually consistent results.""",
    author = 'Christopher Lenz',
    author_email = 'cmlenz@gmx.de',
    maintainer = 'Dirkjan Ochtman',
    maintainer_email = 'dirkjan@ochtman.nl',
    license = 'BSD',
    classifiers = [
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Database :: Front-Ends',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    packages = ['couchdesign', 'couchdesign.tools', 'couchdesign.tests'],
    package_data = {
        'couchdesign.tests': ['_loader/*', '_loader/*/*', '_loader/*/*/*',
                              '_desk/*/*', '_desk/*/*/*', '_desk/*/*/*/*'],
    },
    python_requires = '>=3.8',
    install_requires = [],
    extras_require = {
        'test': ['pytest'],
    },
    entry_points = {
        'console_scripts': [
            'couchdesign-sync = couchdesign.tools.sync:main',
            'couchdesign-replicate = couchdesign.tools.replicate:main',
            'couchdesign-load-design-doc = couchdesign.loader:main',
        ],
    },
    zip_safe = False,
)
