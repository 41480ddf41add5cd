"""
Atomic insert-if-absent for tables with a unique constraint

Replaces the unsafe check-then-insert pattern with a single
INSERT ... ON CONFLICT (<unique column>) DO NOTHING RETURNING <pk>.
The database's unique index is what actually enforces uniqueness; a lost race
shows up as "no row returned" instead of an IntegrityError that would poison
the session.

Usage:
    from apps.shared.insert import insert_unless_exists

    post_id = insert_unless_exists(db, BlogPost, 'slug', {'title': ..., 'slug': ...})
    if post_id is None:
        # someone else claimed that slug first
        ...
"""

from typing import Any, Dict, Optional, Type

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from apps.shared.database import Base

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def insert_unless_exists(
    db: Session,
    model: Type[Base],
    unique_field: str,
    values: Dict[str, Any],
    returning_field: str = 'id',
) -> Optional[Any]:
    """
    Insert a row unless another row already holds the same unique value.

    Args:
        db: SQLAlchemy database session
        model: SQLAlchemy model class (e.g., BlogPost)
        unique_field: Name of the column backed by a unique index (e.g., 'slug')
        values: Column values for the new row, must include unique_field
        returning_field: Column to return for the inserted row (default: 'id')

    Returns:
        The returning_field value of the new row, or None if the unique value
        was already taken. The caller owns the transaction (commit/rollback).

    Raises:
        ValueError: If the model or values don't contain the unique field, or
            the session is bound to an unsupported database dialect
    """
    if not hasattr(model, unique_field):
        raise ValueError(f"Model {model.__name__} does not have field '{unique_field}'")
    if unique_field not in values:
        raise ValueError(f"values must include the unique field '{unique_field}'")

    dialect = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise ValueError(f"Atomic insert is not supported on dialect '{dialect}'")

    stmt = (
        insert(model)
        .values(**values)
        .on_conflict_do_nothing(index_elements=[unique_field])
        .returning(getattr(model, returning_field))
    )

    return db.execute(stmt).scalar_one_or_none()
