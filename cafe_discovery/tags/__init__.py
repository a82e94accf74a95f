"""
Tag frequency lookups.

Responsibilities:
- Define the interface for per-cafe tag report counts.
- Provide a pandas-backed implementation over exported tag reports.
"""
