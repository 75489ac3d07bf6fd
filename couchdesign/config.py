# -*- coding: utf-8 -*-
#
# Copyright (C) 2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Connection settings shared by every request made through a client.

Options are assembled with a builder and frozen once built:

>>> options = ConnectOptions.builder() \\
...     .socket_timeout(30000) \\
...     .connection_timeout(5000) \\
...     .max_connections(4) \\
...     .build()
>>> options.max_connections
4
>>> options.socket_timeout = 1
Traceback (most recent call last):
  ...
AttributeError: ConnectOptions is immutable

Unset values fall back to the defaults of the transport:

>>> ConnectOptions().proxy_host is None
True
"""

import os

from couchdesign.errors import ValidationError
from couchdesign.util import environ_int

__all__ = ['ConnectOptions', 'ConnectOptionsBuilder']
__docformat__ = 'restructuredtext en'


_FIELDS = ('socket_timeout', 'connection_timeout', 'max_connections',
           'proxy_host', 'proxy_port')


class ConnectOptions(object):
    """Immutable transport settings.

    Timeouts are in milliseconds, as in the configuration surface of the
    server's own tooling; the transport converts them.
    """

    __slots__ = _FIELDS

    def __init__(self, socket_timeout=None, connection_timeout=None,
                 max_connections=None, proxy_host=None, proxy_port=None):
        for name in ('socket_timeout', 'connection_timeout',
                     'max_connections'):
            value = locals()[name]
            if value is not None and (not _is_int(value) or value <= 0):
                raise ValidationError('%s must be a positive integer, got %r'
                                      % (name, value))
        if proxy_port is not None:
            if not _is_int(proxy_port) or not 0 < proxy_port < 65536:
                raise ValidationError('proxy_port must be between 1 and '
                                      '65535, got %r' % (proxy_port,))
            if not proxy_host:
                raise ValidationError('proxy_port given without proxy_host')
        set_ = object.__setattr__
        set_(self, 'socket_timeout', socket_timeout)
        set_(self, 'connection_timeout', connection_timeout)
        set_(self, 'max_connections', max_connections)
        set_(self, 'proxy_host', proxy_host or None)
        set_(self, 'proxy_port', proxy_port)

    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable' % type(self).__name__)

    def __delattr__(self, name):
        raise AttributeError('%s is immutable' % type(self).__name__)

    def __eq__(self, other):
        if not isinstance(other, ConnectOptions):
            return NotImplemented
        return self._astuple() == other._astuple()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._astuple())

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, ', '.join(
            '%s=%r' % (name, getattr(self, name)) for name in _FIELDS
            if getattr(self, name) is not None))

    def _astuple(self):
        return tuple(getattr(self, name) for name in _FIELDS)

    @property
    def proxy(self):
        """The ``(host, port)`` of the proxy, or `None` when requests go
        directly to the server.
        """
        if self.proxy_host is None:
            return None
        return self.proxy_host, self.proxy_port or 80

    def replace(self, **changes):
        """Return a copy with the given attributes changed.

        >>> ConnectOptions(max_connections=2).replace(max_connections=8)
        <ConnectOptions max_connections=8>
        """
        values = dict((name, getattr(self, name)) for name in _FIELDS)
        values.update(changes)
        return type(self)(**values)

    @classmethod
    def builder(cls):
        return ConnectOptionsBuilder()

    @classmethod
    def from_environ(cls, environ=None):
        """Read options from ``COUCHDB_*`` environment variables.

        >>> ConnectOptions.from_environ({'COUCHDB_PROXY_HOST': 'proxy',
        ...                              'COUCHDB_PROXY_PORT': '3128'}).proxy
        ('proxy', 3128)
        """
        if environ is None:
            environ = os.environ
        try:
            return cls(
                socket_timeout=environ_int(environ, 'COUCHDB_SOCKET_TIMEOUT'),
                connection_timeout=environ_int(environ,
                                               'COUCHDB_CONNECT_TIMEOUT'),
                max_connections=environ_int(environ,
                                            'COUCHDB_MAX_CONNECTIONS'),
                proxy_host=environ.get('COUCHDB_PROXY_HOST') or None,
                proxy_port=environ_int(environ, 'COUCHDB_PROXY_PORT'),
            )
        except ValidationError:
            raise
        except ValueError as e:
            raise ValidationError(str(e))


class ConnectOptionsBuilder(object):
    """Fluent builder for `ConnectOptions`; every setter returns the builder.
    """

    def __init__(self):
        self._values = {}

    def _set(self, name, value):
        self._values[name] = value
        return self

    def socket_timeout(self, millis):
        return self._set('socket_timeout', millis)

    def connection_timeout(self, millis):
        return self._set('connection_timeout', millis)

    def max_connections(self, count):
        return self._set('max_connections', count)

    def proxy_host(self, host):
        return self._set('proxy_host', host)

    def proxy_port(self, port):
        return self._set('proxy_port', port)

    def build(self):
        return ConnectOptions(**self._values)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)
