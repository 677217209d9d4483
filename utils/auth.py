"""
Auth Module - Session-aware wrapper around the configured auth provider

``AuthService`` mirrors the provider's session: ``user`` and ``loading`` are
set by the provider's session-change notifications. ``login`` and
``logout`` update them optimistically and the next notification overwrites
them. Provider error codes never reach the user; they are mapped to the
messages below.
"""

from flask import current_app, g, has_request_context

from backends import AuthProviderError, FlaskSessionPersistence, build_auth_provider
from backends.base import (
    INVALID_EMAIL, USER_DISABLED, USER_NOT_FOUND, WRONG_PASSWORD,
    TOO_MANY_REQUESTS, NETWORK_REQUEST_FAILED,
)

NETWORK_ERROR_MESSAGE = 'Network error. Please check your internet connection.'

LOGIN_ERROR_MESSAGES = {
    INVALID_EMAIL: 'Invalid email address.',
    USER_DISABLED: 'This account has been disabled.',
    USER_NOT_FOUND: 'No account found with this email.',
    WRONG_PASSWORD: 'Incorrect password.',
    TOO_MANY_REQUESTS: 'Too many failed attempts. Please try again later.',
    NETWORK_REQUEST_FAILED: NETWORK_ERROR_MESSAGE,
}
LOGOUT_ERROR_MESSAGES = {
    NETWORK_REQUEST_FAILED: NETWORK_ERROR_MESSAGE,
}
RESET_ERROR_MESSAGES = {
    USER_NOT_FOUND: 'No account found with this email.',
    INVALID_EMAIL: 'Invalid email address.',
    NETWORK_REQUEST_FAILED: NETWORK_ERROR_MESSAGE,
}

DEFAULT_LOGIN_ERROR = 'Failed to login. Please try again.'
DEFAULT_LOGOUT_ERROR = 'Failed to logout. Please try again.'
DEFAULT_RESET_ERROR = 'Failed to send password reset email.'


class AuthError(Exception):
    """User-facing authentication failure"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


def _user_message(error, messages, default):
    code = getattr(error, 'code', None) if isinstance(error, AuthProviderError) else None
    return messages.get(code, default), code


class AuthService:
    """Current user and sign-in operations for one mounted session"""

    def __init__(self, provider):
        self.provider = provider
        self.user = None
        self.loading = True
        self._unsubscribe = None

    def start(self):
        """Subscribe to the provider's session-change notifications"""
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.on_session_change(self._on_session_change)
        return self

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _on_session_change(self, principal):
        self.user = principal
        # Stays False once the first notification has arrived
        self.loading = False

    @property
    def is_authenticated(self):
        return self.user is not None

    def login(self, email, password):
        try:
            principal = self.provider.sign_in(email, password)
        except Exception as e:
            message, code = _user_message(e, LOGIN_ERROR_MESSAGES, DEFAULT_LOGIN_ERROR)
            current_app.logger.error(f"Login failed for {email}: {code or str(e)}")
            raise AuthError(message, code) from e

        self.user = principal
        current_app.logger.info(f"Login successful for {principal.email} (uid: {principal.uid})")
        return principal

    def logout(self):
        try:
            self.provider.sign_out()
        except Exception as e:
            message, code = _user_message(e, LOGOUT_ERROR_MESSAGES, DEFAULT_LOGOUT_ERROR)
            current_app.logger.error(f"Logout failed: {code or str(e)}")
            raise AuthError(message, code) from e

        self.user = None
        current_app.logger.info('Logout successful')

    def reset_password(self, email):
        try:
            self.provider.send_password_reset(email)
        except Exception as e:
            message, code = _user_message(e, RESET_ERROR_MESSAGES, DEFAULT_RESET_ERROR)
            current_app.logger.error(f"Password reset failed for {email}: {code or str(e)}")
            raise AuthError(message, code) from e

        current_app.logger.info(f"Password reset e-mail sent to {email}")


def get_auth():
    """
    Auth service for the current request, bound to the browser session.
    Started on first use and closed when the request ends.
    """
    if 'auth' not in g:
        provider = build_auth_provider(current_app.config,
                                       persistence=FlaskSessionPersistence(),
                                       attempts=current_app.extensions.get('login_attempts'),
                                       mailer=current_app.extensions.get('mailer'))
        g.auth = AuthService(provider).start()
    return g.auth


def close_auth(exc=None):
    auth = g.pop('auth', None)
    if auth is not None:
        auth.close()


def current_id_token():
    """ID token of the signed-in admin, used for database writes"""
    if not has_request_context():
        return None
    return get_auth().provider.get_id_token()


__all__ = [
    'AuthError',
    'AuthService',
    'get_auth',
    'close_auth',
    'current_id_token',
]
