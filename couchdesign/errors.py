# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Errors raised locally, before or without any request to the server.

Errors based on HTTP status codes live in `couchdesign.http`.
"""

__all__ = ['ValidationError', 'ShapeError', 'CancellationError']
__docformat__ = 'restructuredtext en'


class ValidationError(ValueError):
    """Exception raised when a request, design document or configuration is
    malformed. No request is made to the server.
    """


class ShapeError(TypeError):
    """Exception raised when a view result does not have the shape or type the
    caller asked for, e.g. a reduced value that is not a single scalar.
    """


class CancellationError(Exception):
    """Exception raised when a wait for an eventually consistent condition is
    interrupted before it was satisfied or timed out.
    """
