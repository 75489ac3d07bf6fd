#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2009 Maximillian Dornseif <md@hudora.de>
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""
This script replicates databases from one CouchDB server to an other.

This is mainly for backup purposes or "priming" a new server before
setting up trigger based replication. But you can also use the
'--continuous' option to set up automatic replication on newer
CouchDB versions.

Replications are only triggered; use '--wait' to poll each target until it
holds as many documents as its source.

Use 'python replicate.py --help' to get more detailed usage instructions.
"""

import logging
import optparse
import sys
import time

from couchdesign import http
from couchdesign.client import Server
from couchdesign.polling import Poller


def replicate(source_server, target_server, dbnames, continuous=False,
              source_url=None):
    """Trigger replication of each named database from the source server to
    the target server, creating missing target databases.

    :return: a list of ``(dbname, ReplicationResult)`` tuples
    """
    if source_url is None:
        source_url = source_server.resource.url
    if not source_url.endswith('/'):
        source_url += '/'
    targetdbs = set(target_server)
    results = []
    for dbname in dbnames:
        replication = target_server.replication() \
            .source('%s%s' % (source_url, dbname)) \
            .target(dbname) \
            .create_target(dbname not in targetdbs) \
            .continuous(continuous)
        results.append((dbname, replication.trigger()))
    return results


def wait_for_targets(source_server, target_server, dbnames, poller):
    """Poll the target databases until each holds at least as many documents
    as its source.

    :return: the names of the databases that did not catch up in time
    """
    lagging = []
    for dbname in dbnames:
        expected = len(source_server[dbname])
        def count():
            try:
                return len(target_server[dbname])
            except http.ResourceNotFound:
                # not created by the replication yet
                return 0
        if poller.wait_for(count, lambda n: n >= expected) < expected:
            lagging.append(dbname)
    return lagging


def main(argv=None):

    usage = '%prog [options]'
    parser = optparse.OptionParser(usage=usage)
    parser.add_option('--source-server',
        action='store',
        dest='source_url',
        help='the url of the server to replicate from')
    parser.add_option('--target-server',
        action='store',
        dest='target_url',
        default="http://127.0.0.1:5984",
        help='the url of the server to replicate to [%default]')
    parser.add_option('--database',
        action='append',
        dest='dbnames',
        help='Database to replicate. Can be given more than once. [all databases]')
    parser.add_option('--continuous',
        action='store_true',
        dest='continuous',
        help='trigger continuous replication in cochdb')
    parser.add_option('--wait',
        action='store',
        dest='wait',
        type='int',
        default=0,
        help='seconds to wait for the targets to catch up [%default]')
    parser.add_option('--verbose',
        action='store_true',
        dest='verbose',
        help='enable debug logging')

    options, args = parser.parse_args(argv)
    if not options.target_url or (not options.source_url):
        parser.error("Need at least --source-server and --target-server")

    logging.basicConfig(level=options.verbose and logging.DEBUG or
                        logging.WARNING)

    if not options.source_url.endswith('/'):
        options.source_url = options.source_url + '/'
    if not options.target_url.endswith('/'):
        options.target_url = options.target_url + '/'

    source_server = Server(options.source_url)
    target_server = Server(options.target_url)

    if not options.dbnames:
        dbnames = sorted(i for i in source_server if not i.startswith('_'))
    else:
        dbnames = options.dbnames

    for dbname in sorted(dbnames, reverse=True):
        start = time.time()
        result = replicate(source_server, target_server, [dbname],
                           continuous=options.continuous,
                           source_url=options.source_url)[0][1]
        sys.stdout.write('%s %s %.1fs\n' % (
            dbname, result.ok and 'triggered' or 'failed',
            time.time() - start))
        sys.stdout.flush()

    if options.wait:
        lagging = wait_for_targets(source_server, target_server, dbnames,
                                   Poller(timeout=options.wait))
        for dbname in lagging:
            sys.stderr.write('%s has not caught up\n' % dbname)
        if lagging:
            sys.exit(1)

if __name__ == '__main__':
    main()
