"""pagedb: transactional queries, record mapping and windowed pagination."""

__version__ = "0.1.0"
