"""
Module: venue_reporting.selectors.base
Responsibility: Base class for read-only query selectors.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller but never
      add, delete, flush or commit.
    - Selectors return frozen dataclasses, not ORM instances.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from venue_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Selectors perform read-only queries on a caller-owned session."""

    def __init__(self, session: Session):
        self.session = session
