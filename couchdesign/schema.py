# -*- coding: utf-8 -*-
#
# Copyright (C) 2007 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Mapping from raw JSON data structures to Python objects and vice versa.

To define a document schema, you declare a Python class inherited from
`Document`, and add any number of `Field` attributes:

>>> class Post(Document):
...     title = TextField()
...     body = TextField()
>>> post = Post(id='hello', title='Hello', body='Hi there')
>>> post.title
'Hello'
>>> post.unwrap()
{'_id': 'hello', 'title': 'Hello', 'body': 'Hi there'}

Objects wrap the raw data rather than copying it, so changes made through the
object are visible in the JSON structure that gets sent to the server:

>>> data = {'_id': 'hello', '_rev': '1-abc', 'title': 'Hello'}
>>> post = Post.wrap(data)
>>> post.title = 'Hello again'
>>> data['title']
'Hello again'
>>> post.rev
'1-abc'
"""

from collections.abc import MutableMapping

__all__ = ['Schema', 'Document', 'Field', 'TextField', 'DictField',
           'MappingField']
__docformat__ = 'restructuredtext en'


class Field(object):
    """Basic unit for mapping a piece of data between Python and JSON.

    Instances of this class can be added to subclasses of `Document` to describe
    the schema of a document. A field set to `None` is removed from the JSON
    data instead of being stored as ``null``.
    """

    def __init__(self, name=None, default=None):
        self.name = name
        self.default = default

    def __get__(self, instance, owner):
        if instance is None:
            return self
        value = instance._data.get(self.name)
        if value is None and self.default is not None:
            default = self.default
            if callable(default):
                default = default()
            value = default
        if value is not None:
            value = self._to_python(value)
        return value

    def __set__(self, instance, value):
        if value is None:
            instance._data.pop(self.name, None)
        else:
            instance._data[self.name] = self._to_json(value)

    def _to_python(self, value):
        return value

    def _to_json(self, value):
        return self._to_python(value)


class SchemaMeta(type):

    def __new__(cls, name, bases, d):
        fields = {}
        for base in bases:
            if hasattr(base, '_fields'):
                fields.update(base._fields)
        for attrname, attrval in d.items():
            if isinstance(attrval, Field):
                if not attrval.name:
                    attrval.name = attrname
                fields[attrname] = attrval
        d['_fields'] = fields
        return type.__new__(cls, name, bases, d)


class Schema(object, metaclass=SchemaMeta):

    def __init__(self, **values):
        self._data = {}
        for attrname, field in self._fields.items():
            if attrname in values:
                setattr(self, attrname, values.pop(attrname))
            elif field.default is not None:
                setattr(self, attrname, getattr(self, attrname))
        if values:
            raise TypeError('unexpected field(s) for %s: %s' % (
                type(self).__name__, ', '.join(sorted(values))))

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data or ())

    def __contains__(self, name):
        return name in self._data

    def __delitem__(self, name):
        del self._data[name]

    def __getitem__(self, name):
        return self._data[name]

    def __setitem__(self, name, value):
        self._data[name] = value

    def get(self, name, default=None):
        return self._data.get(name, default)

    def unwrap(self):
        return self._data

    @classmethod
    def wrap(cls, data):
        instance = cls.__new__(cls)
        instance._data = data
        return instance


class Document(Schema):

    def __init__(self, id=None, **values):
        Schema.__init__(self, **values)
        if id is not None:
            data = {'_id': id}
            data.update(self._data)
            self._data = data

    def __repr__(self):
        return '<%s %r@%r %r>' % (type(self).__name__, self.id, self.rev,
                                  dict([(k, v) for k, v in self._data.items()
                                        if k not in ('_id', '_rev')]))

    @property
    def id(self):
        return self._data.get('_id')

    @id.setter
    def id(self, value):
        if self.rev is not None:
            raise AttributeError('id can only be set on new documents')
        self._data['_id'] = value

    @property
    def rev(self):
        return self._data.get('_rev')


class TextField(Field):
    """Schema field for string values."""
    _to_python = str


class DictField(Field):
    """Field type for nested dictionaries.

    >>> class Author(Schema):
    ...     name = TextField()
    >>> class Post(Document):
    ...     author = DictField(Author)
    >>> post = Post(author={'name': 'John Doe'})
    >>> post.author.name
    'John Doe'
    """

    def __init__(self, schema, name=None, default=None):
        Field.__init__(self, name=name, default=default)
        self.schema = schema

    def _to_python(self, value):
        return self.schema.wrap(value)

    def _to_json(self, value):
        if isinstance(value, Schema):
            return value.unwrap()
        return dict(value)


class MappingField(Field):
    """Field type for an ordered mapping from names to other fields, such as
    the views of a design document.

    >>> class Author(Schema):
    ...     name = TextField()
    >>> class Team(Document):
    ...     members = MappingField(DictField(Author))
    >>> team = Team(members={'jd': {'name': 'John Doe'}})
    >>> team.members['jd'].name
    'John Doe'
    >>> team.members['mj'] = Author(name='Mary Jane')
    >>> sorted(team.unwrap()['members'])
    ['jd', 'mj']

    Reading a missing mapping doesn't add it to the document; the first
    assignment does:

    >>> team = Team()
    >>> len(team.members), 'members' in team
    (0, False)
    >>> team.members['jd'] = {'name': 'John Doe'}
    >>> 'members' in team
    True
    """

    def __init__(self, field, name=None, default=None):
        Field.__init__(self, name=name, default=default)
        if type(field) is type and issubclass(field, Field):
            field = field()
        self.field = field

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return self.Proxy(instance._data.get(self.name), self.field,
                          instance._data, self.name)

    def _to_python(self, value):
        return self.Proxy(value, self.field)

    def _to_json(self, value):
        if isinstance(value, MappingField.Proxy):
            value = value.mapping or {}
        return dict((key, self.field._to_json(item))
                    for key, item in value.items())

    class Proxy(MutableMapping):

        def __init__(self, mapping, field, parent=None, key=None):
            self.mapping = mapping
            self.field = field
            self.parent = parent
            self.key = key

        def __repr__(self):
            return repr(self.mapping or {})

        def __delitem__(self, key):
            if self.mapping is None:
                raise KeyError(key)
            del self.mapping[key]

        def __getitem__(self, key):
            if self.mapping is None:
                raise KeyError(key)
            return self.field._to_python(self.mapping[key])

        def __setitem__(self, key, value):
            if self.mapping is None:
                self.mapping = self.parent.setdefault(self.key, {})
            self.mapping[key] = self.field._to_json(value)

        def __iter__(self):
            return iter(self.mapping or ())

        def __len__(self):
            return len(self.mapping or ())
