"""
Review storage.

In-memory deduplicated review store with snapshot persistence to disk.
"""
