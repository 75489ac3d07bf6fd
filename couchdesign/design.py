# -*- coding: utf-8 -*-
#
# Copyright (C) 2008 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Utility code for managing design documents.

A `DesignDocument` can be authored in code, or loaded from a directory tree
on the local *desk* (see `couchdesign.loader`):

>>> doc = DesignDocument('example', views={
...     'by_name': MapReduce(map='function(doc) { emit(doc.name, 1); }',
...                          reduce='_count')})
>>> doc.id
'_design/example'
>>> doc.views['by_name'].reduce
'_count'

Two design documents are equal when their content is equal, whatever their
revisions are:

>>> from copy import deepcopy
>>> stored = DesignDocument.wrap(dict(deepcopy(doc.unwrap()), _rev='3-5e1f'))
>>> stored == doc
True
>>> stored.views['by_name'].dbcopy = 'reduced_by_name'
>>> stored == doc
False

Use `DesignDocumentManager.synchronize()` (through ``db.design()``) to make the
database hold the same definition, writing only when something changed.
"""

from collections import namedtuple
import logging

from couchdesign import http, loader
from couchdesign.errors import ValidationError
from couchdesign.schema import DictField, Document, Field, MappingField, \
        Schema, TextField

__all__ = ['MapReduce', 'DesignDocument', 'DesignDocumentManager',
           'SyncResult', 'design_id']
__docformat__ = 'restructuredtext en'

log = logging.getLogger('couchdesign.design')

DESIGN_PREFIX = '_design/'

# bookkeeping the server adds to a document; not part of its definition
REVISION_KEYS = frozenset(['_rev', '_revisions', '_revs_info', '_conflicts',
                           '_deleted_conflicts', '_local_seq'])


def design_id(name):
    """Return the document ID for a design document name.

    >>> design_id('example')
    '_design/example'
    >>> design_id('_design/example')
    '_design/example'
    """
    if name.startswith(DESIGN_PREFIX):
        return name
    return DESIGN_PREFIX + name


def _normalized(value):
    """Strip `None` values and empty containers at every level, so that a
    definition leaving out a member compares equal to one that spells it out
    empty.

    >>> _normalized({'views': {'all': {'map': 'f', 'options': {}}},
    ...              'rewrites': [], 'lib': None})
    {'views': {'all': {'map': 'f'}}}
    """
    if isinstance(value, dict):
        items = ((key, _normalized(item)) for key, item in value.items())
        return dict((key, item) for key, item in items
                    if item not in (None, {}, []))
    if isinstance(value, list):
        return [_normalized(item) for item in value]
    return value


class MapReduce(Schema):
    """Definition of one view: the map function, an optional reduce function
    and an optional ``dbcopy`` database the reduced rows get copied to.
    """

    map = TextField()
    reduce = TextField()
    dbcopy = TextField()
    options = Field()

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self._data)

    @property
    def queryable(self):
        return bool(self.map)


class DesignDocument(Document):
    """A design document: views plus the other functions the server runs on
    behalf of a database.
    """

    language = TextField(default='javascript')
    views = MappingField(DictField(MapReduce))
    validate_doc_update = TextField()
    filters = MappingField(TextField)
    lists = MappingField(TextField)
    shows = MappingField(TextField)
    updates = MappingField(TextField)
    indexes = Field()
    rewrites = Field()
    lib = Field()

    def __init__(self, id=None, **values):
        if id is not None:
            id = design_id(id)
        Document.__init__(self, id, **values)

    def __eq__(self, other):
        if not isinstance(other, DesignDocument):
            return NotImplemented
        return self._content() == other._content()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def _content(self):
        return _normalized(dict((key, value)
                                for key, value in self._data.items()
                                if key not in REVISION_KEYS))

    @property
    def name(self):
        """The name of the design document, without the ``_design/`` prefix.
        """
        if self.id is None:
            return None
        return self.id[len(DESIGN_PREFIX):]

    def view_language(self, name):
        """The language of the named view; the server keeps one language per
        design document.
        """
        if name not in self.views:
            raise KeyError(name)
        return self.language

    def validate(self):
        """Check that the document can be stored and its views queried.

        >>> DesignDocument('broken', views={'all': {'reduce': '_count'}}
        ...                ).validate()
        Traceback (most recent call last):
          ...
        couchdesign.errors.ValidationError: view 'all' in _design/broken has no map function

        :raise ValidationError: if the ID is missing or not a design document
                                ID, or a view has no map function
        """
        if not self.id:
            raise ValidationError('design document has no ID')
        if not self.id.startswith(DESIGN_PREFIX) or not self.name:
            raise ValidationError('%r is not a design document ID' % self.id)
        for name, view in self.views.items():
            if not view.queryable:
                raise ValidationError('view %r in %s has no map function'
                                      % (name, self.id))


class SyncResult(namedtuple('SyncResult', 'action id rev')):
    """Outcome of `DesignDocumentManager.synchronize()`: what was done, and
    the ID and current revision of the design document.
    """

    CREATED = 'created'
    UPDATED = 'updated'
    UNCHANGED = 'unchanged'

    __slots__ = ()

    @property
    def written(self):
        return self.action != self.UNCHANGED


class DesignDocumentManager(object):
    """Keeps the design documents of a database in line with local
    definitions.

    Writes carry the revision of the stored document, so a concurrent writer
    makes them fail with `ResourceConflict`. Conflicts are never retried here.
    """

    def __init__(self, db, desk=None):
        """Initialize the manager.

        :param db: the `Database` instance
        :param desk: the directory holding local design document definitions,
                     defaults to ``COUCHDB_DESIGN_DOCS`` or ``design-docs``
        """
        self.db = db
        self.desk = desk or loader.default_desk()

    def __repr__(self):
        return '<%s %r %r>' % (type(self).__name__, self.db, self.desk)

    def _resource(self, id, *path):
        return self.db.resource('_design', id[len(DESIGN_PREFIX):], *path)

    def get_from_desk(self, name):
        """Load the named design document from the desk. No request is made.

        :raise ResourceNotFound: if the desk has no such definition
        """
        return DesignDocument.wrap(loader.load_from_desk(name, self.desk))

    def get_all_from_desk(self):
        """Load every design document on the desk."""
        return [self.get_from_desk(name)
                for name in loader.list_desk(self.desk)]

    def get_from_db(self, id, rev=None):
        """Fetch a design document from the database.

        :param id: the design document ID or name
        :param rev: a specific revision to fetch
        :raise ResourceNotFound: if the database has no such design document
        """
        options = {}
        if rev is not None:
            options['rev'] = rev
        _, _, data = self._resource(design_id(id)).get_json(**options)
        return DesignDocument.wrap(data)

    def get_all_from_db(self):
        """Fetch every design document stored in the database."""
        request = self.db.all_docs_request_builder() \
            .start_key(DESIGN_PREFIX) \
            .end_key('_design0') \
            .include_docs(True) \
            .build()
        return [DesignDocument.wrap(dict(doc))
                for doc in request.get_response().docs()]

    def create(self, doc):
        """Store a design document that does not exist in the database yet.

        :return: the new revision
        :raise ResourceConflict: if a document with that ID already exists
        """
        doc.validate()
        body = dict((key, value) for key, value in doc.unwrap().items()
                    if key not in REVISION_KEYS)
        _, _, data = self._resource(doc.id).put_json(body=body)
        doc['_rev'] = data['rev']
        return data['rev']

    def update(self, doc, rev):
        """Replace the stored design document, provided it is still at
        revision `rev`.

        :return: the new revision
        :raise ResourceConflict: if the stored document has moved past `rev`
        """
        if not rev:
            raise ValidationError('updating %s requires the revision it '
                                  'replaces' % doc.id)
        doc.validate()
        body = dict((key, value) for key, value in doc.unwrap().items()
                    if key not in REVISION_KEYS)
        body['_rev'] = rev
        _, _, data = self._resource(doc.id).put_json(body=body)
        doc['_rev'] = data['rev']
        return data['rev']

    def synchronize(self, local):
        """Ensure the database holds the same definition as `local`.

        The design document is created when missing and replaced when its
        content differs; nothing is written when it is equal, so repeated
        calls don't create new revisions. On return `local` carries the
        current revision.

        :param local: the `DesignDocument` as it should be stored
        :return: a `SyncResult`
        :raise ValidationError: if `local` is not a valid design document
        :raise ResourceConflict: if another writer changed the document after
                                 it was fetched
        """
        local.validate()
        try:
            remote = self.get_from_db(local.id)
        except http.ResourceNotFound:
            remote = None

        if remote is None:
            rev = self.create(local)
            log.info('Created %s at revision %s', local.id, rev)
            return SyncResult(SyncResult.CREATED, local.id, rev)

        if local == remote:
            local['_rev'] = remote.rev
            log.debug('%s is up to date at revision %s', local.id, remote.rev)
            return SyncResult(SyncResult.UNCHANGED, local.id, remote.rev)

        try:
            rev = self.update(local, remote.rev)
        except http.ResourceConflict:
            log.warning('Conflict updating %s from revision %s', local.id,
                        remote.rev)
            raise
        log.info('Updated %s from revision %s to %s', local.id, remote.rev,
                 rev)
        return SyncResult(SyncResult.UPDATED, local.id, rev)
    synchronize_with_db = synchronize

    def synchronize_all(self, docs=None):
        """Synchronize a list of design documents, by default all of those on
        the desk.

        :return: a list of `SyncResult`, in the order of `docs`
        """
        if docs is None:
            docs = self.get_all_from_desk()
        return [self.synchronize(doc) for doc in docs]

    def remove(self, id_or_doc):
        """Delete a design document from the database.

        When given a `DesignDocument` with a revision, the deletion is
        conditional on that revision; otherwise the current one is looked up.
        """
        if isinstance(id_or_doc, DesignDocument):
            id, rev = id_or_doc.id, id_or_doc.rev
        else:
            id, rev = design_id(id_or_doc), None
        if rev is None:
            rev = self.get_from_db(id).rev
        _, _, data = self._resource(id).delete_json(rev=rev)
        log.info('Removed %s at revision %s', id, rev)
        return data['rev']

    def info(self, id):
        """Return the index status of a design document, the JSON response of
        ``GET /db/_design/<name>/_info``.
        """
        _, _, data = self._resource(design_id(id), '_info').get_json()
        return data
