from __future__ import annotations

from ..extensions import db
from carecenter.time_utils import utcnow


class CodeSequence(db.Model):
    """
    Atomic per-series code counters.

    WHY: Prevent race conditions when generating patient and transaction codes.
    next_number is the number the next allocation will hand out.
    """
    __tablename__ = "code_sequences"
    __table_args__ = (
        db.UniqueConstraint("series", name="uq_code_sequences_series"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    series = db.Column(db.String(32), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )
