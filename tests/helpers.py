from unittest.mock import MagicMock

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'password123'


def make_response(status_code=200, body=None, text=''):
    """Stand-in for a requests.Response"""
    response = MagicMock()
    response.status_code = status_code
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body if body is not None else {}
    response.text = text
    return response
