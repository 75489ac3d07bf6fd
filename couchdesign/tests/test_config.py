# -*- coding: utf-8 -*-
#
# Copyright (C) 2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import unittest

from couchdesign import config, util
from couchdesign.config import ConnectOptions
from couchdesign.errors import ValidationError
from couchdesign.tests import testutil


class ConnectOptionsTestCase(unittest.TestCase):

    def test_defaults(self):
        options = ConnectOptions()
        self.assertEqual(None, options.socket_timeout)
        self.assertEqual(None, options.connection_timeout)
        self.assertEqual(None, options.max_connections)
        self.assertEqual(None, options.proxy)

    def test_builder(self):
        options = ConnectOptions.builder() \
            .socket_timeout(30000) \
            .connection_timeout(5000) \
            .max_connections(6) \
            .proxy_host('proxy.example.org') \
            .proxy_port(3128) \
            .build()
        self.assertEqual(30000, options.socket_timeout)
        self.assertEqual(5000, options.connection_timeout)
        self.assertEqual(6, options.max_connections)
        self.assertEqual(('proxy.example.org', 3128), options.proxy)

    def test_immutable(self):
        options = ConnectOptions(max_connections=2)
        self.assertRaises(AttributeError, setattr, options,
                          'max_connections', 3)
        self.assertRaises(AttributeError, delattr, options,
                          'max_connections')
        self.assertEqual(2, options.max_connections)

    def test_builder_is_reusable(self):
        builder = ConnectOptions.builder().max_connections(2)
        first = builder.build()
        second = builder.max_connections(4).build()
        self.assertEqual(2, first.max_connections)
        self.assertEqual(4, second.max_connections)

    def test_equality(self):
        self.assertEqual(ConnectOptions(socket_timeout=100),
                         ConnectOptions(socket_timeout=100))
        self.assertNotEqual(ConnectOptions(socket_timeout=100),
                            ConnectOptions(socket_timeout=200))
        self.assertEqual(hash(ConnectOptions(max_connections=3)),
                         hash(ConnectOptions(max_connections=3)))

    def test_replace(self):
        options = ConnectOptions(socket_timeout=100, max_connections=2)
        changed = options.replace(max_connections=5)
        self.assertEqual(2, options.max_connections)
        self.assertEqual(5, changed.max_connections)
        self.assertEqual(100, changed.socket_timeout)

    def test_proxy_default_port(self):
        options = ConnectOptions(proxy_host='proxy')
        self.assertEqual(('proxy', 80), options.proxy)

    def test_rejects_non_positive(self):
        self.assertRaises(ValidationError, ConnectOptions, socket_timeout=0)
        self.assertRaises(ValidationError, ConnectOptions,
                          connection_timeout=-1)
        self.assertRaises(ValidationError, ConnectOptions,
                          max_connections='4')
        self.assertRaises(ValidationError, ConnectOptions,
                          max_connections=True)

    def test_rejects_bad_proxy(self):
        self.assertRaises(ValidationError, ConnectOptions, proxy_port=3128)
        self.assertRaises(ValidationError, ConnectOptions,
                          proxy_host='proxy', proxy_port=70000)

    def test_validation_error_is_value_error(self):
        self.assertRaises(ValueError, ConnectOptions, max_connections=0)

    def test_from_environ(self):
        options = ConnectOptions.from_environ({
            'COUCHDB_SOCKET_TIMEOUT': '60000',
            'COUCHDB_CONNECT_TIMEOUT': '2000',
            'COUCHDB_MAX_CONNECTIONS': '10',
        })
        self.assertEqual(60000, options.socket_timeout)
        self.assertEqual(2000, options.connection_timeout)
        self.assertEqual(10, options.max_connections)
        self.assertEqual(None, options.proxy)

    def test_from_environ_empty(self):
        self.assertEqual(ConnectOptions(), ConnectOptions.from_environ({}))

    def test_from_environ_invalid(self):
        self.assertRaises(ValidationError, ConnectOptions.from_environ,
                          {'COUCHDB_MAX_CONNECTIONS': 'many'})
        self.assertRaises(ValidationError, ConnectOptions.from_environ,
                          {'COUCHDB_SOCKET_TIMEOUT': '-5'})


def suite():
    suite = unittest.TestSuite()
    suite.addTest(unittest.defaultTestLoader.loadTestsFromTestCase(
        ConnectOptionsTestCase))
    suite.addTest(testutil.doctest_suite(config))
    suite.addTest(testutil.doctest_suite(util))
    return suite


if __name__ == '__main__':
    unittest.main(defaultTest='suite')
