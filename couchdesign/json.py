# -*- coding: utf-8 -*-
#
# Copyright (C) 2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Thin wrapper around the JSON module used for request and response bodies.

>>> encode({'views': {'all': {'map': 'function(doc) {}'}}})
'{"views":{"all":{"map":"function(doc) {}"}}}'
>>> decode('{"ok": true}')
{'ok': True}
"""

import json as _json

__all__ = ['decode', 'encode']
__docformat__ = 'restructuredtext en'


def decode(string):
    """Decode the given JSON string.

    :param string: the JSON string to decode, as text or UTF-8 bytes
    :return: the corresponding Python data structure
    :rtype: object
    """
    if isinstance(string, bytes):
        string = string.decode('utf-8')
    return _json.loads(string)


def encode(obj):
    """Encode the given object as a JSON string.

    :param obj: the Python data structure to encode
    :return: the corresponding JSON string
    :rtype: str
    """
    return _json.dumps(obj, allow_nan=False, ensure_ascii=False,
                       separators=(',', ':'))
