#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Load design documents from the filesystem into a dict.
Subset of couchdbkit/couchapp functionality.

Description
-----------

Convert a target directory into an object (dict).

Each filename (without extension) or subdirectory name is a key in this object.

For files, the utf-8-decoded contents are the value, except for .json files
which are first decoded as json.

Subdirectories are converted into objects using the same procedure and then
added to the parent object.

Typically used for design documents. This directory tree::

  .
    ├── filters
    │   └── forms_only.js
    ├── _id
    ├── language
    ├── lib
    │   └── validate.js
    └── views
        ├── view_a
        │   ├── dbcopy
        │   ├── map.js
        │   └── reduce.js
        └── view_b
            └── map.js

Becomes this object::

    {
      "views": {
        "view_a": {
          "map": "function(doc) { ... }",
          "reduce": "_count",
          "dbcopy": "reduced_view_a"
        },
        "view_b": {
          "map": "function(doc) { ... }"
        }
      },
      "_id": "_design/name_of_design_document",
      "filters": {
        "forms_only": "function(doc, req) { ... }"
      },
      "language": "javascript",
      "lib": {
        "validate": "// A library for validations ..."
      }
    }

A *desk* is a directory holding one such tree per design document, named
after the design document::

  design-docs
    ├── example
    │   └── views
    │       └── ...
    └── views101
        └── views
            └── ...

"""

import io
import os
import os.path
import json

from couchdesign.http import ResourceNotFound

DEFAULT_DESK = 'design-docs'


def default_desk():
    """Return the desk named by the ``COUCHDB_DESIGN_DOCS`` environment
    variable, falling back to ``design-docs``.
    """
    return os.environ.get('COUCHDB_DESIGN_DOCS', DEFAULT_DESK)


def load_design_doc(directory, strip=False, predicate=None):
    """
    Load a design document from the filesystem.

    strip: remove leading and trailing whitespace from file contents,
        like couchdbkit.
    predicate: function that is passed each file name, and should return
        false for files that are to be skipped.
    """
    if not os.path.isdir(directory):
        raise OSError('%s is not a directory' % directory)

    objects = {}

    for (dirpath, dirnames, filenames) in os.walk(directory, topdown=False):
        key = os.path.split(dirpath)[-1]
        ob = {}
        objects[dirpath] = (key, ob)

        for name in filenames:
            if name.startswith('.'):
                continue
            if predicate is not None and not predicate(name):
                continue
            fkey = os.path.splitext(name)[0]
            fullname = os.path.join(dirpath, name)
            with io.open(fullname, 'r', encoding='utf-8') as f:
                contents = f.read()
                if name.endswith('.json'):
                    contents = json.loads(contents)
                elif strip:
                    contents = contents.strip()
                ob[fkey] = contents

        for name in dirnames:
            if name == '_attachments':
                raise NotImplementedError()
            if name.startswith('.'):
                continue
            subkey, subthing = objects[os.path.join(dirpath, name)]
            ob[subkey] = subthing

    return ob


def list_desk(desk=None):
    """Return the sorted names of the design documents on the desk."""
    desk = desk or default_desk()
    if not os.path.isdir(desk):
        return []
    return sorted(name for name in os.listdir(desk)
                  if not name.startswith('.') and
                  os.path.isdir(os.path.join(desk, name)))


def load_from_desk(name, desk=None):
    """Load the named design document from the desk.

    The ``_id`` defaults to ``_design/<name>`` and the language to
    ``javascript`` when the tree does not provide them.

    :raise ResourceNotFound: if the desk has no design document of that name
    """
    desk = desk or default_desk()
    if name.startswith('_design/'):
        name = name[8:]
    directory = os.path.join(desk, name)
    if not name or not os.path.isdir(directory):
        raise ResourceNotFound(('not_found',
                                'no design document %r in %s' % (name, desk)))
    doc = load_design_doc(directory, strip=True)
    doc.setdefault('_id', '_design/%s' % name)
    doc.setdefault('language', 'javascript')
    return doc


def main():
    import sys
    try:
        directory = sys.argv[1]
    except IndexError:
        sys.stderr.write("Usage:\n\t{} [directory]\n".format(sys.argv[0]))
        sys.exit(1)
    obj = load_design_doc(directory)
    sys.stdout.write(json.dumps(obj, indent=2))


if __name__ == "__main__":
    main()
