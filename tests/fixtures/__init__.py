# tests/fixtures/__init__.py
"""Shared builders for glosspipe tests.

Usage:
    from tests.fixtures.documents import make_document, make_word
"""
