"""
Entity store interface used by the metrics core, with a SQLAlchemy-backed implementation.

The core only needs four primitives: load an entity by kind and id, create one with explicit
initial fields, save a mutated entity, and commit or roll back the changes made for one event.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lending_metrics.database.models import Base
from lending_metrics.exceptions import EntityStoreError


class EntityStore(Protocol):
    def load[E: Base](self, kind: type[E], entity_id: str) -> E | None: ...
    def create[E: Base](self, kind: type[E], entity_id: str, fields: Mapping[str, Any]) -> E: ...
    def save(self, entity: Base) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class SqlAlchemyEntityStore:
    """
    Entity store operating on a SQLAlchemy session. Any SQLAlchemy failure is re-raised as
    `EntityStoreError`.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def load[E: Base](self, kind: type[E], entity_id: str) -> E | None:
        try:
            return self.session.get(kind, entity_id)
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="load", error=str(exc)) from exc

    def create[E: Base](self, kind: type[E], entity_id: str, fields: Mapping[str, Any]) -> E:
        entity = kind(id=entity_id, **fields)
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="create", error=str(exc)) from exc
        return entity

    def save(self, entity: Base) -> None:
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="save", error=str(exc)) from exc

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise EntityStoreError(operation="commit", error=str(exc)) from exc

    def rollback(self) -> None:
        self.session.rollback()
