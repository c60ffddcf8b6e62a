"""Personal-finance assistant answering questions over a local SQLite ledger."""

__version__ = "0.1.0"
