"""Storage layer.

This module persists ingested rows, allotment documents and table metadata
in SQLite stores. It powers table browsing and the SDK client.
"""
