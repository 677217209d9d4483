"""
Local Backend - SQL document store and single-admin auth provider
Used in development and tests, or wherever no Firebase project is configured.
"""

import re
import time
import uuid
from datetime import datetime, timezone

from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db
from models import StoredDocument
from .base import (
    AuthProvider, AuthProviderError, Document, DocumentStore, DocumentStoreError, Principal,
    INVALID_EMAIL, USER_NOT_FOUND, WRONG_PASSWORD, TOO_MANY_REQUESTS,
)

TIMESTAMP_KEY = '$timestamp'
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Failed sign-in attempts: {email: [timestamp, ...]}
FAILED_LOGINS = {}


def _to_json(value):
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {TIMESTAMP_KEY: value.isoformat()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value


def _from_json(value):
    if isinstance(value, dict):
        if set(value) == {TIMESTAMP_KEY}:
            return datetime.fromisoformat(value[TIMESTAMP_KEY])
        return {k: _from_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_json(v) for v in value]
    return value


class SQLDocumentStore(DocumentStore):
    """Schemaless documents stored as JSON rows through Flask-SQLAlchemy"""

    def query_collection(self, name, order_by=None, descending=True):
        try:
            rows = (StoredDocument.query
                    .filter_by(collection=name)
                    .order_by(StoredDocument.created_at, StoredDocument.id)
                    .all())
        except Exception as e:
            raise DocumentStoreError(f"Query on {name} failed: {str(e)}") from e

        documents = [Document(id=row.id, data=_from_json(row.fields or {})) for row in rows]
        if order_by:
            # Match Firestore: documents without the order field are left out
            documents = [d for d in documents if d.data.get(order_by) is not None]
            documents.sort(key=lambda d: d.data[order_by], reverse=descending)
        return documents

    def add_document(self, collection, fields):
        document = StoredDocument(id=str(uuid.uuid4()), collection=collection,
                                  fields=_to_json(dict(fields)))
        try:
            db.session.add(document)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            raise DocumentStoreError(f"Insert into {collection} failed: {str(e)}") from e
        current_app.logger.info(f"Document store: created {collection}/{document.id}")
        return document.id

    def _get(self, collection, document_id):
        document = StoredDocument.query.filter_by(collection=collection, id=document_id).first()
        if document is None:
            raise DocumentStoreError(f"No document {collection}/{document_id}",
                                     code='not_found', status=404)
        return document

    def update_document(self, collection, document_id, fields):
        document = self._get(collection, document_id)
        merged = dict(document.fields or {})
        merged.update(_to_json(dict(fields)))
        # Reassign so SQLAlchemy sees the JSON column change
        document.fields = merged
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            raise DocumentStoreError(f"Update of {collection}/{document_id} failed: {str(e)}") from e
        current_app.logger.info(f"Document store: updated {collection}/{document_id}")

    def delete_document(self, collection, document_id):
        document = StoredDocument.query.filter_by(collection=collection, id=document_id).first()
        if document is None:
            return
        try:
            db.session.delete(document)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            raise DocumentStoreError(f"Delete of {collection}/{document_id} failed: {str(e)}") from e
        current_app.logger.info(f"Document store: deleted {collection}/{document_id}")


class LocalAuthProvider(AuthProvider):
    """Single admin account configured through ADMIN_EMAIL / ADMIN_PASSWORD"""

    def __init__(self, admin_email, admin_password, persistence=None,
                 max_attempts=5, window=300, attempts=None, mailer=None):
        super().__init__(persistence)
        self.admin_email = (admin_email or '').strip().lower() or None
        self.password_hash = generate_password_hash(admin_password) if admin_password else None
        self.max_attempts = max_attempts
        self.window = window
        self.attempts = attempts if attempts is not None else FAILED_LOGINS
        self.mailer = mailer

    def _principal(self):
        uid = uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{self.admin_email}").hex
        return Principal(uid=uid, email=self.admin_email, display_name='Admin')

    def _recent_failures(self, email):
        now = time.time()
        recent = [ts for ts in self.attempts.get(email, []) if now - ts < self.window]
        self.attempts[email] = recent
        return recent

    def sign_in(self, email, password):
        email = (email or '').strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise AuthProviderError(INVALID_EMAIL)
        if len(self._recent_failures(email)) >= self.max_attempts:
            raise AuthProviderError(TOO_MANY_REQUESTS)
        if not self.admin_email or email != self.admin_email:
            self.attempts[email].append(time.time())
            raise AuthProviderError(USER_NOT_FOUND)
        if not self.password_hash or not check_password_hash(self.password_hash, password or ''):
            self.attempts[email].append(time.time())
            raise AuthProviderError(WRONG_PASSWORD)

        self.attempts.pop(email, None)
        principal = self._principal()
        self._start_session(principal)
        current_app.logger.info(f"Local sign-in for {principal.email}")
        return principal

    def send_password_reset(self, email):
        email = (email or '').strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise AuthProviderError(INVALID_EMAIL)
        if not self.admin_email or email != self.admin_email:
            raise AuthProviderError(USER_NOT_FOUND)

        current_app.logger.info(f"Password reset requested for {email}")
        if self.mailer:
            self.mailer(
                email,
                'Password reset requested',
                'A password reset was requested for the portfolio admin account.\n'
                'The local admin password is managed through the ADMIN_PASSWORD '
                'environment variable; update it and restart the site to change it.'
            )
