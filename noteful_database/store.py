"""
Document-store facade over a SQLAlchemy session.

Routes and services talk to storage only through DocumentStore, using plain
filter dicts:

    {"user_id": uid}                         equality
    {"id": OneOf(ids)}                       set membership
    {"tags": Contains(tag_id)}               membership in a collection relationship
    {("title", "content"): Matches(term)}    case-insensitive substring, ORed over fields
"""
import logging
from contextlib import contextmanager

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Storage backend failure; the session has been rolled back."""


class DuplicateKeyError(StoreError):
    """A unique constraint was violated."""


class OneOf:
    def __init__(self, values):
        self.values = list(values)


class Contains:
    def __init__(self, value):
        self.value = value


class Matches:
    def __init__(self, term):
        self.term = term


def _escape_like(term):
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column_criterion(model, field, value):
    attr = getattr(model, field)
    if isinstance(value, OneOf):
        return attr.in_(value.values)
    if isinstance(value, Contains):
        related = attr.property.mapper.class_
        return attr.any(related.id == value.value)
    if isinstance(value, Matches):
        return attr.ilike(f"%{_escape_like(value.term)}%", escape="\\")
    if value is None:
        return attr.is_(None)
    return attr == value


def build_criteria(model, filter):
    criteria = []
    for key, value in (filter or {}).items():
        if isinstance(key, tuple):
            criteria.append(or_(*(_column_criterion(model, field, value) for field in key)))
        else:
            criteria.append(_column_criterion(model, key, value))
    return criteria


# PUBLIC_INTERFACE
class DocumentStore:
    """CRUD and count operations over the mapped models, bound to one session."""

    def __init__(self, session):
        self.session = session
        self._in_atomic = False

    def _select(self, model, filter):
        return select(model).where(*build_criteria(model, filter))

    def _resolve_relationships(self, model, attrs):
        relationships = model.__mapper__.relationships
        resolved = {}
        for key, value in attrs.items():
            if key in relationships and value is not None:
                related = relationships[key].mapper.class_
                ids = list(dict.fromkeys(value))
                value = list(self.session.scalars(select(related).where(related.id.in_(ids))))
            resolved[key] = value
        return resolved

    def _unset(self, entity, fields):
        relationships = type(entity).__mapper__.relationships
        for field in fields:
            setattr(entity, field, [] if field in relationships else None)

    def _commit(self):
        try:
            if self._in_atomic:
                self.session.flush()
            else:
                self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            message = str(exc.orig)
            if "unique" in message.lower() or "duplicate" in message.lower():
                raise DuplicateKeyError(message) from exc
            logger.error("Store integrity failure: %s", message)
            raise StoreError(message) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store commit failed: %s", exc)
            raise StoreError(str(exc)) from exc

    @contextmanager
    def atomic(self):
        """
        Groups several writes into one commit. Writes inside the block only
        flush; any exception rolls all of them back and propagates.
        """
        if self._in_atomic:
            yield self
            return
        self._in_atomic = True
        try:
            yield self
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._in_atomic = False
        self._commit()

    def _read(self, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Store read failed: %s", exc)
            raise StoreError(str(exc)) from exc

    def find(self, model, filter=None, order_by=None):
        stmt = self._select(model, filter)
        if order_by is not None:
            stmt = stmt.order_by(*order_by) if isinstance(order_by, (list, tuple)) else stmt.order_by(order_by)
        return self._read(lambda: list(self.session.scalars(stmt)))

    def find_one(self, model, filter):
        stmt = self._select(model, filter).limit(1)
        return self._read(lambda: self.session.scalars(stmt).first())

    def count(self, model, filter=None):
        stmt = select(func.count()).select_from(model).where(*build_criteria(model, filter))
        return self._read(lambda: self.session.scalar(stmt))

    def create(self, model, attrs):
        entity = model(**self._read(lambda: self._resolve_relationships(model, attrs)))
        self.session.add(entity)
        self._commit()
        self.session.refresh(entity)
        return entity

    def update_one(self, model, filter, patch=None, unset=()):
        """Applies `patch` and clears `unset` on the first match; None if nothing matched."""
        entity = self.find_one(model, filter)
        if entity is None:
            return None
        for key, value in self._read(lambda: self._resolve_relationships(model, patch or {})).items():
            setattr(entity, key, value)
        self._unset(entity, unset)
        self._commit()
        self.session.refresh(entity)
        return entity

    def update_many(self, model, filter, patch=None, unset=()):
        entities = self.find(model, filter)
        resolved = self._read(lambda: self._resolve_relationships(model, patch or {}))
        for entity in entities:
            for key, value in resolved.items():
                setattr(entity, key, value)
            self._unset(entity, unset)
        self._commit()
        return len(entities)

    def delete_one(self, model, filter):
        """Deletes the first match; returns whether anything was deleted."""
        entity = self.find_one(model, filter)
        if entity is None:
            return False
        self.session.delete(entity)
        self._commit()
        return True
