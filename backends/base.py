"""
Backend Boundary - Types shared by the hosted and local backends

The document database and the auth provider are external collaborators.
Everything the rest of the app needs from them goes through the small
interfaces defined here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from flask import current_app, session


class DocumentStoreError(Exception):
    """Raised when a document database call fails"""

    def __init__(self, message, code='unknown', status=None):
        super().__init__(message)
        self.code = code
        self.status = status


class AuthProviderError(Exception):
    """Raised by auth providers with a provider error code (``auth/...``)"""

    def __init__(self, code, message=''):
        super().__init__(message or code)
        self.code = code


# Provider error codes understood by the auth service
INVALID_EMAIL = 'auth/invalid-email'
USER_DISABLED = 'auth/user-disabled'
USER_NOT_FOUND = 'auth/user-not-found'
WRONG_PASSWORD = 'auth/wrong-password'
TOO_MANY_REQUESTS = 'auth/too-many-requests'
NETWORK_REQUEST_FAILED = 'auth/network-request-failed'
EMAIL_ALREADY_IN_USE = 'auth/email-already-in-use'
INVALID_CREDENTIAL = 'auth/invalid-credential'


@dataclass
class Document:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_record(self):
        """Flatten into the plain dict shape used by views"""
        return {**self.data, 'id': self.id}


@dataclass
class Principal:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None

    @classmethod
    def from_session(cls, data):
        if not data or not data.get('uid'):
            return None
        return cls(uid=data['uid'], email=data.get('email'),
                   display_name=data.get('display_name'))


class DocumentStore:
    """Interface every document database client implements"""

    def query_collection(self, name, order_by=None, descending=True) -> List[Document]:
        raise NotImplementedError

    def add_document(self, collection, fields) -> str:
        raise NotImplementedError

    def update_document(self, collection, document_id, fields) -> None:
        raise NotImplementedError

    def delete_document(self, collection, document_id) -> None:
        raise NotImplementedError


class InMemoryPersistence:
    """Session persistence for scripts and tests"""

    def __init__(self, data=None):
        self._data = dict(data) if data else None

    def load(self):
        return dict(self._data) if self._data else None

    def save(self, data):
        self._data = dict(data)

    def clear(self):
        self._data = None


class FlaskSessionPersistence:
    """Keeps the signed-in principal in the browser's cookie session"""

    key = 'auth_session'

    def load(self):
        data = session.get(self.key)
        return dict(data) if data else None

    def save(self, data):
        session[self.key] = dict(data)
        session.permanent = True

    def clear(self):
        session.pop(self.key, None)


class AuthProvider:
    """
    Base auth provider: holds session persistence and the listeners
    registered through ``on_session_change``.
    """

    def __init__(self, persistence=None):
        self.persistence = persistence if persistence is not None else InMemoryPersistence()
        self._listeners: List[Callable[[Optional[Principal]], None]] = []

    def current_principal(self) -> Optional[Principal]:
        return Principal.from_session(self.persistence.load())

    def on_session_change(self, callback):
        """
        Register a session-change listener. The callback fires immediately
        with the current session, then on every sign-in and sign-out.

        Returns:
            callable: unsubscribe function
        """
        self._listeners.append(callback)
        callback(self.current_principal())

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self):
        principal = self.current_principal()
        for listener in list(self._listeners):
            try:
                listener(principal)
            except Exception as e:
                current_app.logger.error(f"Session listener failed: {str(e)}")

    def _start_session(self, principal, **extra):
        data = {
            'uid': principal.uid,
            'email': principal.email,
            'display_name': principal.display_name,
        }
        data.update(extra)
        self.persistence.save(data)
        self._notify()

    def sign_in(self, email, password) -> Principal:
        raise NotImplementedError

    def sign_out(self):
        self.persistence.clear()
        self._notify()

    def send_password_reset(self, email):
        raise NotImplementedError

    def get_id_token(self):
        """Bearer token for database calls; None when not signed in"""
        return None


__all__ = [
    'Document',
    'DocumentStore',
    'DocumentStoreError',
    'Principal',
    'AuthProvider',
    'AuthProviderError',
    'InMemoryPersistence',
    'FlaskSessionPersistence',
]
