# -*- coding: utf-8 -*-
#
# Copyright (C) 2007 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from couchdesign.client import Database, Document, Server
from couchdesign.config import ConnectOptions
from couchdesign.design import DesignDocument, DesignDocumentManager, \
        MapReduce, SyncResult
from couchdesign.errors import CancellationError, ShapeError, ValidationError
from couchdesign.http import HTTPError, PreconditionFailed, Resource, \
        ResourceConflict, ResourceNotFound, ServerError, Session, \
        TransportError, Unauthorized
from couchdesign.polling import Poller, wait_for
from couchdesign.replication import Replication

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version('couchdesign')
except PackageNotFoundError:
    __version__ = '?'
