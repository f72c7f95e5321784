"""Integration test package.

These tests exercise the HTTP API end to end against an in-memory
document store.  They need no network access.
"""
