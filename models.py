from extensions import db
from datetime import datetime, timezone
from sqlalchemy import JSON
import uuid


# Custom JSON type that uses JSONB on PostgreSQL and JSON/Text on SQLite
class SafeJSON(db.TypeDecorator):
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import JSONB
            return dialect.type_descriptor(JSONB())
        else:
            return dialect.type_descriptor(JSON())


def _utcnow():
    return datetime.now(timezone.utc)


class StoredDocument(db.Model):
    """Schemaless document row used by the local document store"""
    __tablename__ = 'documents'
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    collection = db.Column(db.String(255), nullable=False)
    fields = db.Column(SafeJSON, default=dict)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        db.Index('idx_documents_collection', 'collection', 'created_at'),
    )
