"""linknav — link-graph traversal and caching for markdown vaults."""

__version__ = "0.1.0"
