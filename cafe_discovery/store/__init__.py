"""
Record store access.

Responsibilities:
- Define the query interface the discovery engine expects from a store.
- Provide a pandas-backed store over the processed cafes dataset.
"""
