from .store import (
    MemoryCardStore,
    MemorySessionStore,
    ParquetCardStore,
    ParquetSessionStore,
    init_store,
    reset_store,
)

__all__ = [
    "MemoryCardStore",
    "MemorySessionStore",
    "ParquetCardStore",
    "ParquetSessionStore",
    "init_store",
    "reset_store",
]
