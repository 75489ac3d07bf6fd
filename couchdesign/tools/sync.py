#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright (C) 2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Utility for pushing the design documents of a desk into a database.

Each design document is written only when its content differs from what the
database holds, so the tool can run on every deployment.
"""

import logging
from optparse import OptionParser
import sys

from couchdesign import __version__ as VERSION
from couchdesign import http
from couchdesign.client import Database
from couchdesign.config import ConnectOptions
from couchdesign.design import DesignDocumentManager
from couchdesign.errors import ValidationError

log = logging.getLogger('couchdesign.tools.sync')


def sync_desk(db, desk=None, names=None):
    """Synchronize design documents from the desk with the database.

    :param db: the `Database` to write to
    :param desk: the desk directory, defaults to the ``COUCHDB_DESIGN_DOCS``
                 setting
    :param names: names of the design documents to push, or `None` for all
                  of them
    :return: a list of `SyncResult`
    """
    manager = DesignDocumentManager(db, desk)
    if names:
        docs = [manager.get_from_desk(name) for name in names]
    else:
        docs = manager.get_all_from_desk()
    if not docs:
        log.warning('No design documents found in %s', manager.desk)
    return manager.synchronize_all(docs)


def _options_from(options):
    changes = {}
    for name in ('socket_timeout', 'connection_timeout', 'max_connections',
                 'proxy_host', 'proxy_port'):
        value = getattr(options, name)
        if value is not None:
            changes[name] = value
    return ConnectOptions.from_environ().replace(**changes)


def main(argv=None):
    parser = OptionParser(usage='%prog [options] --database URL [NAME ...]',
                          version=VERSION)
    parser.add_option('--database', action='store', dest='database',
                      help='URL of the database to synchronize')
    parser.add_option('--desk', action='store', dest='desk',
                      help='directory holding the design documents '
                           '[$COUCHDB_DESIGN_DOCS or design-docs]')
    parser.add_option('--timeout', action='store', dest='socket_timeout',
                      type='int', help='socket timeout in milliseconds')
    parser.add_option('--connect-timeout', action='store',
                      dest='connection_timeout', type='int',
                      help='connection timeout in milliseconds')
    parser.add_option('--max-connections', action='store',
                      dest='max_connections', type='int',
                      help='maximum number of simultaneous connections')
    parser.add_option('--proxy-host', action='store', dest='proxy_host',
                      help='host name of an HTTP proxy')
    parser.add_option('--proxy-port', action='store', dest='proxy_port',
                      type='int', help='port of the HTTP proxy')
    parser.add_option('--verbose', action='store_true', dest='verbose',
                      help='enable debug logging')
    options, args = parser.parse_args(argv)

    if not options.database:
        parser.error('--database is required')

    logging.basicConfig(level=options.verbose and logging.DEBUG or
                        logging.WARNING)

    try:
        session = http.Session.from_options(_options_from(options))
    except ValidationError as e:
        parser.error(str(e))
    db = Database(options.database, session=session)

    try:
        results = sync_desk(db, options.desk, args)
    except http.ResourceNotFound as e:
        sys.stderr.write('%s\n' % (e,))
        return 1
    except http.ResourceConflict:
        sys.stderr.write('design document changed concurrently; '
                         'run again\n')
        return 1

    for result in results:
        sys.stdout.write('%s %s %s\n' % (result.action, result.id,
                                         result.rev))
    sys.stdout.flush()
    return 0


if __name__ == '__main__':
    sys.exit(main())
