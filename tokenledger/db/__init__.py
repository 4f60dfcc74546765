"""tokenledger database layer.

Provides DuckDB-based storage for ledger snapshots so the in-memory
price registry and balance ledger survive a process restart.
"""
