"""
Backends Package - Document database and auth provider clients
Picks the hosted Firebase clients or the local SQL/admin fallbacks from config.
"""

from .base import (
    AuthProvider,
    AuthProviderError,
    Document,
    DocumentStore,
    DocumentStoreError,
    FlaskSessionPersistence,
    InMemoryPersistence,
    Principal,
)


def build_document_store(config, token_getter=None):
    """
    Create the document store selected by DOCUMENT_BACKEND

    Args:
        config (Mapping): Flask config
        token_getter (callable, optional): returns the current ID token

    Returns:
        DocumentStore
    """
    backend = config.get('DOCUMENT_BACKEND', 'sql')
    if backend == 'firestore':
        from .firestore import FirestoreClient
        return FirestoreClient(config.get('FIREBASE_PROJECT_ID'),
                               api_key=config.get('FIREBASE_API_KEY'),
                               token_getter=token_getter,
                               timeout=config.get('FIREBASE_TIMEOUT'))
    if backend == 'sql':
        from .local import SQLDocumentStore
        return SQLDocumentStore()
    raise ValueError(f"Unknown DOCUMENT_BACKEND: {backend}")


def build_auth_provider(config, persistence=None, attempts=None, mailer=None):
    """Create the auth provider selected by AUTH_BACKEND"""
    backend = config.get('AUTH_BACKEND', 'local')
    if backend == 'firebase':
        from .identity import FirebaseAuthClient
        return FirebaseAuthClient(config.get('FIREBASE_API_KEY'),
                                  persistence=persistence,
                                  timeout=config.get('FIREBASE_TIMEOUT'))
    if backend == 'local':
        from .local import LocalAuthProvider
        return LocalAuthProvider(config.get('ADMIN_EMAIL'),
                                 config.get('ADMIN_PASSWORD'),
                                 persistence=persistence,
                                 max_attempts=config.get('LOGIN_MAX_ATTEMPTS', 5),
                                 window=config.get('LOGIN_ATTEMPT_WINDOW', 300),
                                 attempts=attempts,
                                 mailer=mailer)
    raise ValueError(f"Unknown AUTH_BACKEND: {backend}")


__all__ = [
    'AuthProvider',
    'AuthProviderError',
    'Document',
    'DocumentStore',
    'DocumentStoreError',
    'FlaskSessionPersistence',
    'InMemoryPersistence',
    'Principal',
    'build_document_store',
    'build_auth_provider',
]
