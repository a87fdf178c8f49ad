"""Helpers shared by the repositories."""
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

_CONFLICT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


def exists(db: Session, model, *criteria) -> bool:
    return db.query(db.query(model).filter(*criteria).exists()).scalar()


def insert_ignore(db: Session, model, **values) -> None:
    """INSERT ... ON CONFLICT DO NOTHING for an edge table."""
    insert = _CONFLICT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        db.execute(insert(model).values(**values).on_conflict_do_nothing())
        return
    keys = [values[column.name] for column in model.__table__.primary_key.columns]
    if db.get(model, tuple(keys)) is None:
        db.add(model(**values))
        db.flush()
