# -*- coding: utf-8 -*-
#
# Copyright (C) 2008 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import unittest
import uuid

from couchdesign import polling
from couchdesign.design import SyncResult
from couchdesign.tests import testutil


class DbCopyTestCase(testutil.TempDatabaseMixin, unittest.TestCase):
    """Copying the reduced rows of a view into another database, which the
    server fills some time after the index has been built.
    """

    def setUp(self):
        testutil.TempDatabaseMixin.setUp(self)
        self.couch.dbcopy_delay = 3
        testutil.install_animaldb(self.couch)

    def test_dbcopy(self):
        name, db = self.temp_db()
        self.server.replication() \
            .source(testutil.ANIMALDB_URL) \
            .target(testutil.BASE_URL.replace('http://',
                                              'http://admin:secret@') + name) \
            .trigger()

        copied_name = 'reducedanimaldb' + uuid.uuid4().hex
        dd = db.design().get_from_db('_design/views101')
        dd.views['diet_count'].dbcopy = copied_name

        try:
            result = db.design().synchronize_with_db(dd)
            self.assertEqual(SyncResult.UPDATED, result.action)

            count = db.view_request_builder('views101', 'diet_count') \
                .new_request(str, int).build().get_single_value()
            self.assertEqual(5, count)

            copied = self.server.database(copied_name)
            self.assertEqual(copied_name, copied.name)

            clock = testutil.FakeClock()
            poller = polling.Poller(timeout=120, interval=1, clock=clock,
                                    sleep=clock.sleep)
            doc_ids = poller.wait_for(
                polling.all_doc_ids(self.server, copied_name),
                polling.at_least(3))
            self.assertEqual(3, len(doc_ids))
            self.assertTrue(clock.now > 0)
            self.assertTrue(clock.now <= 120)

            keys = sorted(copied[doc_id]['key'] for doc_id in doc_ids)
            self.assertEqual(['carnivore', 'herbivore', 'omnivore'], keys)
        finally:
            if copied_name in self.server:
                self.server.delete(copied_name)

    def test_copy_never_arrives(self):
        clock = testutil.FakeClock()
        doc_ids = polling.wait_for(
            polling.all_doc_ids(self.server, 'reducedanimaldb'),
            polling.at_least(3), timeout=120, interval=1, clock=clock,
            sleep=clock.sleep)
        self.assertEqual(None, doc_ids)
        self.assertEqual(120, clock.now)


def suite():
    suite = unittest.TestSuite()
    suite.addTest(unittest.defaultTestLoader.loadTestsFromTestCase(
        DbCopyTestCase))
    return suite


if __name__ == '__main__':
    unittest.main(defaultTest='suite')
