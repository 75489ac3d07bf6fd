# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Python client API for CouchDB.

The client is a thin layer over the HTTP API, covering what is needed to
deploy design documents and query their views::

    server = Server()
    db = server.database('animaldb')
    db.design().synchronize(db.design().get_from_desk('views101'))
    count = db.view_request_builder('views101', 'diet_count') \\
        .new_request(str, int).build().get_single_value()
"""

import os
import re

from couchdesign import http

__all__ = ['Server', 'Database', 'Document']
__docformat__ = 'restructuredtext en'


DEFAULT_BASE_URL = os.environ.get('COUCHDB_URL', 'http://localhost:5984/')


class Server(object):
    """Representation of a CouchDB server.

    This class behaves like a dictionary of databases. Use `database()` to
    get hold of one, `create()` and `delete()` to manage them, and
    `replication()` to copy one database into another.
    """

    def __init__(self, url=DEFAULT_BASE_URL, session=None, options=None):
        """Initialize the server object.

        :param url: the URI of the server (for example
                    ``http://localhost:5984/``)
        :param session: an http.Session instance or None for a default session
        :param options: a `ConnectOptions` instance the session is built from
                        when no session is given
        """
        if session is None and options is not None:
            session = http.Session.from_options(options)
        if isinstance(url, str):
            self.resource = http.Resource(url, session)
        else:
            self.resource = url # treat as a Resource object

    def __contains__(self, name):
        """Return whether the server contains a database with the specified
        name.

        :param name: the database name
        :return: `True` if a database with the name exists, `False` otherwise
        """
        if not VALID_DB_NAME.match(name) and name not in SPECIAL_DB_NAMES:
            # no database can have that name
            return False
        try:
            self.resource.head(name)
            return True
        except http.ResourceNotFound:
            return False

    def __iter__(self):
        """Iterate over the names of all databases."""
        status, headers, data = self.resource.get_json('_all_dbs')
        return iter(data)

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.resource.url)

    def __delitem__(self, name):
        """Remove the database with the specified name.

        :param name: the name of the database
        :raise ResourceNotFound: if no database with that name exists
        """
        self.resource.delete_json(validate_dbname(name))

    def __getitem__(self, name):
        """Return a `Database` object representing the database with the
        specified name.

        :param name: the name of the database
        :return: a `Database` object representing the database
        :rtype: `Database`
        :raise ResourceNotFound: if no database with that name exists
        """
        db = Database(self.resource(name), validate_dbname(name))
        db.resource.head() # actually make a request to the database
        return db

    def database(self, name, create=False):
        """Return the database with the specified name.

        :param name: the name of the database
        :param create: whether to create the database if it does not exist
        :rtype: `Database`
        :raise ResourceNotFound: if the database does not exist and `create`
                                 is false
        """
        try:
            return self[name]
        except http.ResourceNotFound:
            if not create:
                raise
        try:
            return self.create(name)
        except http.PreconditionFailed:
            # created by someone else in the meantime
            return self[name]

    def create(self, name):
        """Create a new database with the given name.

        :param name: the name of the database
        :return: a `Database` object representing the created database
        :rtype: `Database`
        :raise PreconditionFailed: if a database with that name already exists
        """
        self.resource.put_json(validate_dbname(name))
        return self[name]

    def delete(self, name):
        """Delete the database with the specified name.

        :param name: the name of the database
        :raise ResourceNotFound: if a database with that name does not exist
        """
        del self[name]

    def replication(self):
        """Return a `Replication` builder that triggers replications on this
        server.
        """
        from couchdesign.replication import Replication
        return Replication(self)

    def replicate(self, source, target, **options):
        """Replicate changes from the source database to the target database.

        :param source: URL of the source database
        :param target: URL of the target database
        :param options: optional replication args, e.g. continuous=True
        :return: the JSON response of the server
        """
        replication = self.replication().source(source).target(target)
        replication.options.update(options)
        return replication.trigger().data


class Database(object):
    """Representation of a database on a CouchDB server.

    Documents are retrieved by their ID using item access, `save()` creates or
    updates them; `design()` gives access to the design documents of the
    database and `view_request_builder()` to their views.
    """

    def __init__(self, url, name=None, session=None):
        if isinstance(url, str):
            if not url.startswith('http'):
                url = DEFAULT_BASE_URL + url
            self.resource = http.Resource(url, session)
        else:
            self.resource = url
        self._name = name
        self._design = None

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.name)

    def __contains__(self, id):
        """Return whether the database contains a document with the specified
        ID.

        :param id: the document ID
        :return: `True` if a document with the ID exists, `False` otherwise
        """
        try:
            self.resource.head(id)
            return True
        except http.ResourceNotFound:
            return False

    def __len__(self):
        """Return the number of documents in the database."""
        _, _, data = self.resource.get_json()
        return data['doc_count']

    def __getitem__(self, id):
        """Return the document with the specified ID.

        :param id: the document ID
        :return: a `Row` object representing the requested document
        :rtype: `Document`
        """
        _, _, data = self.resource.get_json(id)
        return Document(data)

    @property
    def name(self):
        """The name of the database.

        Note that this may require a request to the server unless the name has
        already been cached by the `info()` method.

        :rtype: str
        """
        if self._name is None:
            self.info()
        return self._name

    def save(self, doc, **options):
        """Create a new document or update an existing document.

        If doc has no _id then the server will allocate a random ID and a new
        document will be created. Otherwise the doc's _id will be used to
        identity the document to create or update. Trying to update an existing
        document with an incorrect _rev will raise a ResourceConflict exception.

        :param doc: the document to store
        :param options: optional args, e.g. batch='ok'
        :return: (id, rev) tuple of the save document
        :rtype: `tuple`
        """
        if '_id' in doc:
            func = self.resource(doc['_id']).put_json
        else:
            func = self.resource.post_json
        _, _, data = func(body=doc, **options)
        id, rev = data['id'], data.get('rev')
        doc['_id'] = id
        if rev is not None: # Not present for batch='ok'
            doc['_rev'] = rev
        return id, rev

    def delete(self, doc):
        """Delete the given document from the database.

        :param doc: a dictionary or `Document` object holding the document data
        :raise ResourceConflict: if the document was updated in the database
        """
        if doc['_id'] is None:
            raise ValueError('document ID cannot be None')
        self.resource.delete_json(doc['_id'], rev=doc['_rev'])

    def get(self, id, default=None, **options):
        """Return the document with the specified ID.

        :param id: the document ID
        :param default: the default value to return when the document is not
                        found
        :return: a `Document` object representing the requested document, or
                 `default` if no document with the ID was found
        :rtype: `Document`
        """
        try:
            _, _, data = self.resource.get_json(id, **options)
        except http.ResourceNotFound:
            return default
        if hasattr(data, 'items'):
            return Document(data)
        else:
            return data

    def info(self):
        """Return information about the database as a dictionary.

        The returned dictionary exactly corresponds to the JSON response to
        a ``GET`` request on the database URI.

        :return: a dictionary of database properties
        :rtype: ``dict``
        """
        _, _, data = self.resource.get_json()
        self._name = data['db_name']
        return data

    def design(self, desk=None):
        """Return the `DesignDocumentManager` of this database.

        :param desk: directory of local design document definitions; when
                     omitted the manager is shared between calls
        """
        from couchdesign.design import DesignDocumentManager
        if desk is not None:
            return DesignDocumentManager(self, desk)
        if self._design is None:
            self._design = DesignDocumentManager(self)
        return self._design

    def sync_design_docs(self):
        """Synchronize every design document on the desk with the database.

        :return: a list of `SyncResult`
        """
        return self.design().synchronize_all()

    def view_request_builder(self, design, view):
        """Return a builder for requests against a view.

        :param design: the name or ID of the design document
        :param view: the name of the view
        :rtype: `ViewRequestBuilder`
        """
        from couchdesign.views import ViewRequestBuilder
        return ViewRequestBuilder(self, design, view)

    def all_docs_request_builder(self):
        """Return a builder for requests against ``_all_docs``."""
        from couchdesign.views import AllDocsRequestBuilder
        return AllDocsRequestBuilder(self)


class Document(dict):
    """Representation of a document in the database.

    This is basically just a dictionary with the two additional properties
    `id` and `rev`, which contain the document ID and revision, respectively.
    """

    def __repr__(self):
        return '<%s %r@%r %r>' % (type(self).__name__, self.id, self.rev,
                                  dict([(k,v) for k,v in self.items()
                                        if k not in ('_id', '_rev')]))

    @property
    def id(self):
        """The document ID.

        :rtype: str
        """
        return self['_id']

    @property
    def rev(self):
        """The document revision.

        :rtype: str
        """
        return self['_rev']


SPECIAL_DB_NAMES = set(['_users', '_replicator'])
VALID_DB_NAME = re.compile(r'^[a-z][a-z0-9_$()+-/]*$')
def validate_dbname(name):
    if name in SPECIAL_DB_NAMES:
        return name
    if not VALID_DB_NAME.match(name):
        raise ValueError('Invalid database name')
    return name
