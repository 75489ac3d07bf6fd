# -*- coding: utf-8 -*-
#
# Copyright (C) 2007 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import unittest

from couchdesign.tests import test_client, test_config, test_dbcopy, \
        test_design, test_http, test_loader, test_polling, \
        test_replication, test_schema, test_tools, test_views

def suite():
    suite = unittest.TestSuite()
    suite.addTest(test_client.suite())
    suite.addTest(test_config.suite())
    suite.addTest(test_dbcopy.suite())
    suite.addTest(test_design.suite())
    suite.addTest(test_http.suite())
    suite.addTest(test_loader.suite())
    suite.addTest(test_polling.suite())
    suite.addTest(test_replication.suite())
    suite.addTest(test_schema.suite())
    suite.addTest(test_tools.suite())
    suite.addTest(test_views.suite())
    return suite

if __name__ == '__main__':
    unittest.main(defaultTest='suite')
