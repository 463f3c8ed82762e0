"""Application layer interfaces."""
from .unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory

__all__ = ["AbstractUnitOfWork", "UnitOfWorkFactory"]
