# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Building and executing queries against the views of a database.

Requests are assembled with a builder, which checks the parameters before
anything is sent to the server:

>>> builder = ViewRequestBuilder(None, 'views101', 'diet_count')
>>> request = builder.new_request(str, int).key('herbivore').build()
>>> request.options
{'key': 'herbivore'}
>>> builder.new_request(str, int).limit(-1)
Traceback (most recent call last):
  ...
couchdesign.errors.ValidationError: limit must be a non-negative integer, got -1

A built `ViewRequest` does not change; it can be executed any number of
times, e.g. while waiting for an index to catch up. Querying a view whose
definition changed makes the server rebuild its index; results grow towards
the complete set as the index is built.
"""

from couchdesign import json
from couchdesign.client import Document
from couchdesign.errors import ShapeError, ValidationError

__all__ = ['ViewRequestBuilder', 'RequestBuilder', 'AllDocsRequestBuilder',
           'ViewRequest', 'ViewResponse', 'Row']
__docformat__ = 'restructuredtext en'


STALE_VALUES = ('ok', 'update_after')
UPDATE_VALUES = (True, False, 'lazy')


class ViewRequestBuilder(object):
    """Entry point for requests against one view of a design document."""

    def __init__(self, db, design, view):
        if design and design.startswith('_design/'):
            design = design[8:]
        self.db = db
        self.design = design
        self.view = view

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__,
                            '/'.join(['_view', self.design or '',
                                      self.view or '']))

    def new_request(self, key_type=str, value_type=object):
        """Start a request whose keys are of `key_type` (``list`` for complex
        keys) and whose values are expected to be of `value_type`.
        """
        return RequestBuilder(self.db, ('_design', self.design, '_view',
                                        self.view),
                              key_type=key_type, value_type=value_type)


class RequestBuilder(object):
    """Fluent builder of `ViewRequest` objects; every setter returns the
    builder.
    """

    def __init__(self, db, path, key_type=str, value_type=object):
        self.db = db
        self.path = tuple(path)
        self.key_type = key_type
        self.value_type = value_type
        self.options = {}

    def _set(self, name, value):
        self.options[name] = value
        return self

    def _key(self, name, value):
        self._check_key(name, value)
        return self._set(name, value)

    def _check_key(self, name, value):
        if self.key_type in (None, object):
            return
        if not isinstance(value, self.key_type):
            raise ValidationError('%s must be of type %s, got %r' % (
                name, self.key_type.__name__, value))

    def _count(self, name, value):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValidationError('%s must be a non-negative integer, got %r'
                                  % (name, value))
        return self._set(name, value)

    def key(self, key):
        return self._key('key', key)

    def keys(self, *keys):
        if len(keys) == 1 and isinstance(keys[0], (list, tuple)) and \
                self.key_type is not list:
            keys = keys[0]
        for key in keys:
            self._check_key('keys', key)
        return self._set('keys', list(keys))

    def start_key(self, key):
        return self._key('startkey', key)

    def end_key(self, key):
        return self._key('endkey', key)

    def start_key_doc_id(self, doc_id):
        return self._set('startkey_docid', doc_id)

    def end_key_doc_id(self, doc_id):
        return self._set('endkey_docid', doc_id)

    def inclusive_end(self, flag=True):
        return self._set('inclusive_end', bool(flag))

    def descending(self, flag=True):
        return self._set('descending', bool(flag))

    def group(self, flag=True):
        return self._set('group', bool(flag))

    def group_level(self, level):
        return self._count('group_level', level)

    def reduce(self, flag=True):
        return self._set('reduce', bool(flag))

    def include_docs(self, flag=True):
        return self._set('include_docs', bool(flag))

    def limit(self, count):
        return self._count('limit', count)

    def skip(self, count):
        return self._count('skip', count)

    def stale(self, value):
        if value not in STALE_VALUES:
            raise ValidationError('stale must be one of %s, got %r'
                                  % (', '.join(STALE_VALUES), value))
        return self._set('stale', value)

    def update(self, value):
        if value not in UPDATE_VALUES:
            raise ValidationError('update must be true, false or "lazy", '
                                  'got %r' % (value,))
        return self._set('update', value)

    def build(self):
        """Check the coordinates of the view and return the request.

        :raise ValidationError: if the design document or view name is
                                missing, or the options contradict each other
        """
        if not all(self.path):
            raise ValidationError('a design document and a view name are '
                                  'required, got %r' % '/'.join(
                                      part or '' for part in self.path))
        if 'key' in self.options and 'keys' in self.options:
            raise ValidationError('key and keys cannot be combined')
        if self.options.get('include_docs') and \
                self.options.get('reduce', False) and \
                self.path[0] == '_design':
            raise ValidationError('include_docs requires reduce=false')
        return ViewRequest(self.db, self.path, self.options,
                           key_type=self.key_type,
                           value_type=self.value_type)


class AllDocsRequestBuilder(RequestBuilder):
    """Builder of requests against the ``_all_docs`` index of a database."""

    def __init__(self, db):
        RequestBuilder.__init__(self, db, ('_all_docs',), key_type=str)


class ViewRequest(object):
    """A request against a view, ready to be executed."""

    def __init__(self, db, path, options, key_type=str, value_type=object):
        self.db = db
        self.path = tuple(path)
        self._options = dict(options)
        self.key_type = key_type
        self.value_type = value_type

    def __repr__(self):
        return '<%s %r %r>' % (type(self).__name__, '/'.join(self.path),
                               self._options)

    @property
    def options(self):
        """A copy of the query options."""
        return dict(self._options)

    def _encode_options(self, options):
        retval = {}
        for name, value in options.items():
            if name in ('key', 'startkey', 'endkey') \
                    or not isinstance(value, str):
                value = json.encode(value)
            retval[name] = value
        return retval

    def _exec(self, options):
        resource = self.db.resource(*self.path)
        if 'keys' in options:
            options = options.copy()
            keys = {'keys': options.pop('keys')}
            _, _, data = resource.post_json(body=keys,
                                            **self._encode_options(options))
        else:
            _, _, data = resource.get_json(**self._encode_options(options))
        return data

    def get_response(self):
        """Return the lazily fetched response to this request."""
        return ViewResponse(self, self._options)

    def get_single_value(self):
        """Return the value of a reduced view that produced a single row.

        :return: the value, or `None` if the view produced no rows
        :raise ShapeError: if there is more than one row, or the value is not
                           of the requested value type
        """
        rows = self.get_response().rows
        if not rows:
            return None
        if len(rows) > 1:
            raise ShapeError('expected a single reduced value, got %d rows'
                             % len(rows))
        return _coerce(rows[0].value, self.value_type)

    def pages(self, rows_per_page):
        """Iterate over the results one page at a time.

        Each page is fetched with one extra row, whose key and document ID
        start the next page; rows emitted for documents changed between
        requests may be missed or repeated.

        :param rows_per_page: number of rows on each page
        :return: an iterator over `ViewResponse` pages
        """
        if not isinstance(rows_per_page, int) or rows_per_page <= 0:
            raise ValidationError('rows_per_page must be a positive integer, '
                                  'got %r' % (rows_per_page,))
        if 'keys' in self._options:
            raise ValidationError('requests with keys cannot be paginated')
        options = self.options
        limit = options.pop('limit', None)
        while True:
            batch = rows_per_page
            if limit is not None:
                batch = min(limit, rows_per_page)
            options['limit'] = batch + 1
            data = self._exec(options)
            rows = data['rows']
            page = ViewResponse(self, dict(options, limit=batch),
                                data=dict(data, rows=rows[:batch]))
            yield page

            if limit is not None:
                limit -= len(page)
            if len(rows) <= batch or limit == 0:
                break

            next_row = rows[batch]
            options.update(startkey=next_row['key'], skip=0)
            if next_row.get('id') is not None:
                options['startkey_docid'] = next_row['id']


class ViewResponse(object):
    """The rows a `ViewRequest` produced.

    The request is sent as soon as the response is iterated over, its length
    is requested, or one of its `rows`, `total_rows`, or `offset` properties
    are accessed.
    """

    def __init__(self, request, options, data=None):
        self.request = request
        self.options = options
        self._rows = self._total_rows = self._offset = None
        if data is not None:
            self._load(data)

    def __repr__(self):
        return '<%s %r %r>' % (type(self).__name__, '/'.join(
            self.request.path), self.options)

    def __iter__(self):
        return iter(self.rows)

    def __len__(self):
        return len(self.rows)

    def _fetch(self):
        self._load(self.request._exec(self.options))

    def _load(self, data):
        self._rows = [Row(row) for row in data['rows']]
        self._total_rows = data.get('total_rows')
        self._offset = data.get('offset', 0)

    @property
    def rows(self):
        """The list of rows returned by the view.

        :rtype: `list`
        """
        if self._rows is None:
            self._fetch()
        return self._rows

    @property
    def total_rows(self):
        """The total number of rows in this view.

        This value is `None` for reduce views.

        :rtype: `int` or ``NoneType`` for reduce views
        """
        if self._rows is None:
            self._fetch()
        return self._total_rows

    @property
    def offset(self):
        """The offset of the results from the first row in the view.

        This value is 0 for reduce views.

        :rtype: `int`
        """
        if self._rows is None:
            self._fetch()
        return self._offset

    def keys(self):
        return [row.key for row in self.rows]

    def values(self):
        return [row.value for row in self.rows]

    def doc_ids(self):
        """The IDs of the documents behind the rows; rows of reduce views and
        rows for keys that were not found have none.
        """
        return [row.id for row in self.rows if row.id is not None]

    def docs(self):
        """The documents included with ``include_docs``."""
        return [row.doc for row in self.rows if row.doc is not None]


class Row(dict):
    """Representation of a row as returned by database views."""

    def __repr__(self):
        if self.id is None:
            return '<%s key=%r, value=%r>' % (type(self).__name__, self.key,
                                              self.value)
        return '<%s id=%r, key=%r, value=%r>' % (type(self).__name__, self.id,
                                                 self.key, self.value)

    @property
    def id(self):
        """The associated Document ID if it exists. Returns `None` when it
        doesn't (reduce results).
        """
        return self.get('id')

    @property
    def key(self):
        """The associated key."""
        return self.get('key')

    @property
    def value(self):
        """The associated value."""
        return self.get('value')

    @property
    def error(self):
        """The error reported for a requested key, such as ``not_found``."""
        return self.get('error')

    @property
    def doc(self):
        """The associated document for the row. This is only present when the
        view was accessed with ``include_docs=True`` as a query parameter,
        otherwise this property will be `None`.
        """
        doc = self.get('doc')
        if doc:
            return Document(doc)


def _coerce(value, value_type):
    """
    >>> _coerce(5, int)
    5
    >>> _coerce(5, float)
    5.0
    >>> _coerce('5', int)
    Traceback (most recent call last):
      ...
    couchdesign.errors.ShapeError: expected a value of type int, got '5'
    """
    if value_type in (None, object):
        return value
    if isinstance(value, bool) and value_type is not bool:
        raise ShapeError('expected a value of type %s, got %r'
                         % (value_type.__name__, value))
    if value_type is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, value_type):
        raise ShapeError('expected a value of type %s, got %r'
                         % (value_type.__name__, value))
    return value
