"""
Firebase Auth Client - Email/password accounts over the Identity Toolkit REST API
"""

import time

import requests
from flask import current_app

from .base import (
    AuthProvider, AuthProviderError, Principal,
    INVALID_EMAIL, USER_DISABLED, USER_NOT_FOUND, WRONG_PASSWORD,
    TOO_MANY_REQUESTS, NETWORK_REQUEST_FAILED, EMAIL_ALREADY_IN_USE,
    INVALID_CREDENTIAL,
)

IDENTITY_URL = 'https://identitytoolkit.googleapis.com/v1'
SECURE_TOKEN_URL = 'https://securetoken.googleapis.com/v1/token'

# REST error messages -> provider error codes
REST_ERROR_CODES = {
    'INVALID_EMAIL': INVALID_EMAIL,
    'MISSING_EMAIL': INVALID_EMAIL,
    'USER_DISABLED': USER_DISABLED,
    'EMAIL_NOT_FOUND': USER_NOT_FOUND,
    'USER_NOT_FOUND': USER_NOT_FOUND,
    'INVALID_PASSWORD': WRONG_PASSWORD,
    'MISSING_PASSWORD': WRONG_PASSWORD,
    'TOO_MANY_ATTEMPTS_TRY_LATER': TOO_MANY_REQUESTS,
    'EMAIL_EXISTS': EMAIL_ALREADY_IN_USE,
    'INVALID_LOGIN_CREDENTIALS': INVALID_CREDENTIAL,
    'INVALID_REFRESH_TOKEN': INVALID_CREDENTIAL,
    'TOKEN_EXPIRED': INVALID_CREDENTIAL,
}

# Refresh the ID token this many seconds before it expires
TOKEN_EXPIRY_MARGIN = 60


def error_code_from_message(message):
    # Messages look like "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account..."
    key = (message or '').split(':', 1)[0].strip()
    return REST_ERROR_CODES.get(key, f"auth/{key.lower().replace('_', '-')}" if key else 'auth/internal-error')


class FirebaseAuthClient(AuthProvider):
    """Firebase Authentication provider backed by the REST API"""

    def __init__(self, api_key, persistence=None, timeout=None, http=None):
        super().__init__(persistence)
        if not api_key:
            raise ValueError('A Firebase API key is required for Firebase Auth')
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def _post(self, url, payload):
        try:
            response = self.http.post(url, params={'key': self.api_key}, json=payload,
                                      timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AuthProviderError(NETWORK_REQUEST_FAILED, str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get('error', {}).get('message', '') if isinstance(body, dict) else ''
            raise AuthProviderError(error_code_from_message(message), message)
        return body

    def _start_from_response(self, body):
        principal = Principal(uid=body['localId'], email=body.get('email'),
                              display_name=body.get('displayName') or None)
        expires_in = int(body.get('expiresIn', 3600))
        self._start_session(principal,
                            id_token=body.get('idToken'),
                            refresh_token=body.get('refreshToken'),
                            expires_at=time.time() + expires_in)
        return principal

    def sign_in(self, email, password):
        body = self._post(f"{IDENTITY_URL}/accounts:signInWithPassword", {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        principal = self._start_from_response(body)
        current_app.logger.info(f"Firebase sign-in for {principal.email} (uid: {principal.uid})")
        return principal

    def sign_up(self, email, password):
        """Create an email/password account and sign it in"""
        body = self._post(f"{IDENTITY_URL}/accounts:signUp", {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        principal = self._start_from_response(body)
        current_app.logger.info(f"Firebase account created for {principal.email}")
        return principal

    def send_password_reset(self, email):
        self._post(f"{IDENTITY_URL}/accounts:sendOobCode", {
            'requestType': 'PASSWORD_RESET',
            'email': email,
        })
        current_app.logger.info(f"Password reset e-mail requested for {email}")

    def get_id_token(self):
        data = self.persistence.load()
        if not data or not data.get('id_token'):
            return None
        if data.get('expires_at', 0) - TOKEN_EXPIRY_MARGIN > time.time():
            return data['id_token']
        return self._refresh(data)

    def _refresh(self, data):
        try:
            response = self.http.post(SECURE_TOKEN_URL, params={'key': self.api_key}, data={
                'grant_type': 'refresh_token',
                'refresh_token': data.get('refresh_token'),
            }, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            current_app.logger.warning(f"ID token refresh failed: {str(e)}")
            return None

        try:
            body = response.json()
        except ValueError:
            body = {}

        id_token = body.get('id_token') if response.status_code < 400 and isinstance(body, dict) else None
        if not id_token:
            # Refresh rejected or returned no token: the session is over
            current_app.logger.warning(f"ID token refresh rejected ({response.status_code}), signing out")
            self.sign_out()
            return None

        data.update({
            'id_token': id_token,
            'refresh_token': body.get('refresh_token', data.get('refresh_token')),
            'expires_at': time.time() + int(body.get('expires_in', 3600)),
        })
        self.persistence.save(data)
        return data['id_token']
