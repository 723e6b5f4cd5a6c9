"""Storage engine building blocks: LRU buffer pool, index root pages, B+ tree index and catalog metadata."""

__version__ = "0.1.0"