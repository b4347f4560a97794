from autosentience.store.base import Store
from autosentience.store.sql import SqlStore

__all__ = ["SqlStore", "Store"]
