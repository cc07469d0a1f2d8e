"""Core package for the media collections service.

This package contains the storage, retrieval and transform layer behind
the HTTP API: resolving collection and file identifiers against a
storage root, listing collections, reading files, ingesting uploads and
resizing images on the fly. Nothing in here knows about HTTP; errors are
raised as :mod:`gallery.errors` types and mapped to responses by
``main.py``. See individual modules for details.
"""
