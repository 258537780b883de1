"""
Owner-scoped repository functions shared by every tenant table.

Every query filters on ``user_id`` so a caller can only see, change or delete
its own rows. Filters are plain equality filters; there is no pagination.
"""
from __future__ import annotations

import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from botpanel.db.models import now_utc
from botpanel.utils.text_search import row_matches

ACTIVITY_FLAGS = ("is_active", "active", "enabled")


def activity_flag_name(model) -> Optional[str]:
    """Return the name of the model's on/off column, if it has one."""
    for name in ACTIVITY_FLAGS:
        if hasattr(model, name):
            return name
    return None


def default_ordering(model) -> list:
    return [model.created_at.desc()]


def scoped_query(db: Session, model, user_id: uuid.UUID):
    return db.query(model).filter(model.user_id == user_id)


def _apply_filters(query, model, filters: Optional[Mapping[str, Any]]):
    for key, value in (filters or {}).items():
        if value is None:
            continue
        column = getattr(model, key, None)
        if column is None:
            raise ValueError(f"Unknown filter '{key}' for {model.__tablename__}")
        query = query.filter(column == value)
    return query


def commit_or_rollback(db: Session) -> None:
    """Commit the session; roll back and re-raise on database errors."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_owned(
    db: Session,
    model,
    user_id: uuid.UUID,
    *,
    filters: Optional[Mapping[str, Any]] = None,
    order_by: Optional[Iterable] = None,
):
    q = _apply_filters(scoped_query(db, model, user_id), model, filters)
    return q.order_by(*(order_by or default_ordering(model))).all()


def get_owned(db: Session, model, row_id: uuid.UUID, user_id: uuid.UUID):
    return scoped_query(db, model, user_id).filter(model.id == row_id).first()


def create_owned(db: Session, model, user_id: uuid.UUID, data: Dict[str, Any]):
    """Insert a row stamped with the caller's id.

    None values for columns with a default (activity flags, timestamps) are
    dropped so the column default applies.
    """
    columns = sa_inspect(model).columns
    values = {
        key: value for key, value in data.items()
        if value is not None or key not in columns or columns[key].default is None
    }
    row = model(user_id=user_id, **values)
    db.add(row)
    commit_or_rollback(db)
    db.refresh(row)
    return row


def apply_changes(row, changes: Mapping[str, Any]) -> None:
    for key, value in changes.items():
        setattr(row, key, value)


def update_owned(db: Session, model, row_id: uuid.UUID, user_id: uuid.UUID, changes: Mapping[str, Any]):
    """Apply ``changes`` to the caller's row; returns None when no row matched."""
    row = get_owned(db, model, row_id, user_id)
    if row is None:
        return None
    apply_changes(row, changes)
    # Explicit so a no-op update still refreshes the timestamp
    row.updated_at = now_utc()
    commit_or_rollback(db)
    db.refresh(row)
    return row


def toggle_owned(db: Session, model, row_id: uuid.UUID, user_id: uuid.UUID):
    flag = activity_flag_name(model)
    if flag is None:
        raise ValueError(f"{model.__tablename__} has no activity flag")
    row = get_owned(db, model, row_id, user_id)
    if row is None:
        return None
    return update_owned(db, model, row_id, user_id, {flag: not bool(getattr(row, flag))})


def delete_owned(db: Session, model, row_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Delete the caller's row with proper error handling."""
    try:
        row = get_owned(db, model, row_id, user_id)
        if row is None:
            return False
        db.delete(row)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete {model.__tablename__} {row_id}: {str(e)}")


def search_owned(
    db: Session,
    model,
    user_id: uuid.UUID,
    query: Optional[str],
    *,
    serialize: Callable[[Any], Mapping[str, Any]],
    filters: Optional[Mapping[str, Any]] = None,
    order_by: Optional[Iterable] = None,
) -> List[Any]:
    """Return the caller's rows whose serialized form contains ``query``."""
    rows = list_owned(db, model, user_id, filters=filters, order_by=order_by)
    return [row for row in rows if row_matches(serialize(row), query)]
