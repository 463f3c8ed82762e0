"""Persistence adapters that do not need a database."""
from .in_memory import (
    InMemoryDailyCounter,
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryStore,
    InMemoryUnitOfWork,
)

__all__ = [
    "InMemoryDailyCounter",
    "InMemoryOrderRepository",
    "InMemoryProductRepository",
    "InMemoryStore",
    "InMemoryUnitOfWork",
]
