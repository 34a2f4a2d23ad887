"""CSV ingestion pipeline.

This module reads CSV sources, normalizes headers and rows,
and writes deduplicated rows into per-file and merged tables.
"""
