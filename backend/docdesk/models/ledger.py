from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class LedgerRecord(db.Model):
    """
    One key-value record per persisted collection.

    The value is the full collection snapshot (a JSON object for settings,
    a JSON array for documents, products and clients). Every mutation reads
    the snapshot, changes it in memory and writes it back wholesale.

    version_id gives optimistic locking: a second writer that read the same
    version fails with StaleDataError and is retried by the service layer.
    """
    __tablename__ = "ledger_records"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(64), nullable=False, unique=True, index=True)
    value = db.Column(db.JSON, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<LedgerRecord key={self.key!r} version_id={self.version_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
