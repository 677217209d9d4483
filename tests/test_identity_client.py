import time
from unittest.mock import MagicMock

import pytest
import requests

from backends import AuthProviderError, InMemoryPersistence
from backends.base import (
    EMAIL_ALREADY_IN_USE, INVALID_CREDENTIAL, NETWORK_REQUEST_FAILED,
    TOO_MANY_REQUESTS, USER_NOT_FOUND, WRONG_PASSWORD,
)
from backends.identity import SECURE_TOKEN_URL, FirebaseAuthClient, error_code_from_message
from tests.helpers import make_response

SIGN_IN_BODY = {
    'localId': 'uid-1',
    'email': 'admin@example.com',
    'displayName': '',
    'idToken': 'id-token',
    'refreshToken': 'refresh-token',
    'expiresIn': '3600',
}


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def client(app_ctx, http, persistence):
    return FirebaseAuthClient('web-key', persistence=persistence, http=http)


@pytest.mark.parametrize('message, code', [
    ('EMAIL_NOT_FOUND', USER_NOT_FOUND),
    ('INVALID_PASSWORD', WRONG_PASSWORD),
    ('TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled', TOO_MANY_REQUESTS),
    ('EMAIL_EXISTS', EMAIL_ALREADY_IN_USE),
    ('INVALID_LOGIN_CREDENTIALS', INVALID_CREDENTIAL),
    ('OPERATION_NOT_ALLOWED', 'auth/operation-not-allowed'),
    ('', 'auth/internal-error'),
])
def test_error_codes(message, code):
    assert error_code_from_message(message) == code


def test_sign_in_starts_session(client, http, persistence):
    http.post.return_value = make_response(body=SIGN_IN_BODY)
    seen = []
    client.on_session_change(seen.append)

    principal = client.sign_in('admin@example.com', 'password123')

    assert principal.uid == 'uid-1'
    assert principal.display_name is None
    assert seen[-1] == principal
    assert persistence.load()['id_token'] == 'id-token'
    assert http.post.call_args.kwargs['params'] == {'key': 'web-key'}
    assert http.post.call_args.kwargs['json']['returnSecureToken'] is True


def test_sign_in_rejected(client, http, persistence):
    http.post.return_value = make_response(400, body={'error': {'message': 'INVALID_PASSWORD'}})

    with pytest.raises(AuthProviderError) as exc_info:
        client.sign_in('admin@example.com', 'nope')

    assert exc_info.value.code == WRONG_PASSWORD
    assert persistence.load() is None


def test_network_failure(client, http):
    http.post.side_effect = requests.exceptions.ConnectionError('offline')

    with pytest.raises(AuthProviderError) as exc_info:
        client.sign_in('admin@example.com', 'password123')
    assert exc_info.value.code == NETWORK_REQUEST_FAILED


def test_sign_up(client, http):
    http.post.return_value = make_response(body=SIGN_IN_BODY)

    principal = client.sign_up('admin@example.com', 'password123')

    assert principal.uid == 'uid-1'
    assert http.post.call_args.args[0].endswith('accounts:signUp')


def test_send_password_reset(client, http):
    http.post.return_value = make_response(body={'email': 'admin@example.com'})

    client.send_password_reset('admin@example.com')

    assert http.post.call_args.args[0].endswith('accounts:sendOobCode')
    assert http.post.call_args.kwargs['json'] == {'requestType': 'PASSWORD_RESET',
                                                  'email': 'admin@example.com'}


def test_sign_out_clears_session(client, http, persistence):
    http.post.return_value = make_response(body=SIGN_IN_BODY)
    client.sign_in('admin@example.com', 'password123')

    client.sign_out()

    assert persistence.load() is None
    assert client.current_principal() is None
    assert client.get_id_token() is None


def test_fresh_token_is_reused(client, http, persistence):
    persistence.save({'uid': 'uid-1', 'id_token': 'still-good', 'expires_at': time.time() + 600})

    assert client.get_id_token() == 'still-good'
    http.post.assert_not_called()


def test_expiring_token_is_refreshed(client, http, persistence):
    persistence.save({'uid': 'uid-1', 'id_token': 'old', 'refresh_token': 'r1',
                      'expires_at': time.time() + 10})
    http.post.return_value = make_response(body={'id_token': 'new', 'refresh_token': 'r2',
                                                 'expires_in': '3600'})

    assert client.get_id_token() == 'new'
    assert http.post.call_args.args[0] == SECURE_TOKEN_URL
    assert http.post.call_args.kwargs['data']['refresh_token'] == 'r1'
    assert persistence.load()['refresh_token'] == 'r2'


def test_rejected_refresh_signs_out(client, http, persistence):
    persistence.save({'uid': 'uid-1', 'id_token': 'old', 'refresh_token': 'revoked',
                      'expires_at': time.time() - 10})
    http.post.return_value = make_response(400, body={'error': {'message': 'TOKEN_EXPIRED'}})

    assert client.get_id_token() is None
    assert persistence.load() is None


@pytest.mark.parametrize('body', [{'refresh_token': 'r2', 'expires_in': '3600'}, ValueError('not json')])
def test_refresh_without_token_signs_out(client, http, persistence, body):
    persistence.save({'uid': 'uid-1', 'id_token': 'old', 'refresh_token': 'r1',
                      'expires_at': time.time() - 10})
    http.post.return_value = make_response(200, body=body)

    assert client.get_id_token() is None
    assert persistence.load() is None


def test_requires_api_key():
    with pytest.raises(ValueError):
        FirebaseAuthClient('')
