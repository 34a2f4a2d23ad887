"""Named-operation boundary for presentation layers.

This package maps operation names and JSON-serializable arguments onto
application services and always answers with a structured result.
"""
