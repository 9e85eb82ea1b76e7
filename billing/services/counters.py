from sqlalchemy import text
from sqlalchemy.orm import Session

from ..models.base import utcnow


def next_value(db: Session, name: str) -> int:
    """Atomically increment the named counter and return the new value."""
    now = utcnow()
    db.execute(
        text(
            "INSERT INTO counters (name, seq, updated_at) "
            "VALUES (:name, 0, :updated_at) ON CONFLICT (name) DO NOTHING"
        ),
        {"name": name, "updated_at": now},
    )
    return db.execute(
        text(
            "UPDATE counters SET seq = seq + 1, updated_at = :updated_at "
            "WHERE name = :name RETURNING seq"
        ),
        {"name": name, "updated_at": now},
    ).scalar_one()
