# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

__all__ = [
    'StringIO', 'urlsplit', 'urlunsplit', 'urlquote', 'urlunquote',
    'urlencode', 'parse_qsl', 'utype', 'strbase', 'environ_int',
]

utype = str
strbase = str, bytes

from io import BytesIO as StringIO
from urllib.parse import urlsplit, urlunsplit, urlencode, parse_qsl
from urllib.parse import quote as urlquote
from urllib.parse import unquote as urlunquote


def environ_int(environ, name, default=None):
    """Read an integer setting from an environment mapping.

    >>> environ_int({'COUCHDB_MAX_CONNECTIONS': '4'}, 'COUCHDB_MAX_CONNECTIONS')
    4
    >>> environ_int({}, 'COUCHDB_MAX_CONNECTIONS', 10)
    10
    """
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError('%s must be an integer, got %r' % (name, value))
