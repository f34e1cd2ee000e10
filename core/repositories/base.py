"""Generic repository over a SQLAlchemy session."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.db import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Lookups and inserts shared by every repository.

    Subclasses set ``model``. Writes are flushed, not committed; the session
    owner commits.
    """

    model: type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def first_where(self, *criteria: Any) -> ModelT | None:
        """First row matching every criterion, in primary key order."""
        stmt = select(self.model).where(*criteria).order_by(*self.model.__mapper__.primary_key).limit(1)
        return self.session.scalars(stmt).first()

    def create(self, **values: Any) -> ModelT:
        """Insert a row and flush so its primary key is populated."""
        instance = self.model(**values)
        self.session.add(instance)
        self.session.flush()
        return instance
