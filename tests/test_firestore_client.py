from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from backends import DocumentStoreError
from backends.firestore import (
    FirestoreClient, decode_fields, encode_fields, encode_value, parse_timestamp,
)
from tests.helpers import make_response

ROOT = 'https://firestore.googleapis.com/v1/projects/demo/databases/(default)/documents'


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(app_ctx, http):
    return FirestoreClient('demo', api_key='web-key', token_getter=lambda: None, http=http)


def test_encode_typed_values():
    created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    fields = encode_fields({
        'title': 'App',
        'featured': True,
        'proficiency': 4,
        'rating': 4.5,
        'createdAt': created,
        'techStack': ['Flutter'],
        'socialLinks': {'github': 'https://github.com/x'},
        'resumeUrl': None,
    })

    assert fields['title'] == {'stringValue': 'App'}
    assert fields['featured'] == {'booleanValue': True}
    assert fields['proficiency'] == {'integerValue': '4'}
    assert fields['rating'] == {'doubleValue': 4.5}
    assert fields['createdAt'] == {'timestampValue': '2024-05-01T12:30:00.000000Z'}
    assert fields['techStack'] == {'arrayValue': {'values': [{'stringValue': 'Flutter'}]}}
    assert fields['socialLinks'] == {'mapValue': {'fields': {'github': {'stringValue': 'https://github.com/x'}}}}
    assert fields['resumeUrl'] == {'nullValue': None}


def test_encode_rejects_unknown_types():
    with pytest.raises(TypeError):
        encode_value(object())


def test_decode_fields():
    data = decode_fields({
        'proficiency': {'integerValue': '5'},
        'createdAt': {'timestampValue': '2024-05-01T12:30:00.123456789Z'},
        'techStack': {'arrayValue': {}},
        'socialLinks': {'mapValue': {'fields': {'github': {'stringValue': 'gh'}}}},
    })

    assert data['proficiency'] == 5
    assert data['createdAt'] == datetime(2024, 5, 1, 12, 30, 0, 123456, tzinfo=timezone.utc)
    assert data['techStack'] == []
    assert data['socialLinks'] == {'github': 'gh'}


def test_parse_timestamp_without_fraction():
    assert parse_timestamp('2024-01-02T03:04:05Z') == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_query_collection(client, http):
    http.request.return_value = make_response(body=[
        {'document': {'name': "projects/demo/databases/(default)/documents/skills/s1",
                      'fields': {'name': {'stringValue': 'Dart'},
                                 'proficiency': {'integerValue': '5'}}}},
        {'readTime': '2024-01-01T00:00:00Z'},
    ])

    documents = client.query_collection('skills', order_by='proficiency', descending=True)

    assert len(documents) == 1
    assert documents[0].id == 's1'
    assert documents[0].data == {'name': 'Dart', 'proficiency': 5}

    method, url = http.request.call_args.args
    assert method == 'POST'
    assert url == f"{ROOT}:runQuery"
    query = http.request.call_args.kwargs['json']['structuredQuery']
    assert query['from'] == [{'collectionId': 'skills'}]
    assert query['orderBy'] == [{'field': {'fieldPath': 'proficiency'}, 'direction': 'DESCENDING'}]
    assert ('key', 'web-key') in http.request.call_args.kwargs['params']
    assert 'Authorization' not in http.request.call_args.kwargs['headers']


def test_query_without_order(client, http):
    http.request.return_value = make_response(body=[])

    assert client.query_collection('profile') == []
    assert 'orderBy' not in http.request.call_args.kwargs['json']['structuredQuery']


def test_writes_carry_id_token(app_ctx, http):
    client = FirestoreClient('demo', token_getter=lambda: 'id-token', http=http)
    http.request.return_value = make_response(body={'name': f"{ROOT}/projects/new-id"})

    assert client.add_document('projects', {'title': 'App'}) == 'new-id'

    method, url = http.request.call_args.args
    assert (method, url) == ('POST', f"{ROOT}/projects")
    assert http.request.call_args.kwargs['headers'] == {'Authorization': 'Bearer id-token'}
    assert http.request.call_args.kwargs['json'] == {'fields': {'title': {'stringValue': 'App'}}}


def test_update_uses_field_mask(client, http):
    http.request.return_value = make_response(body={})

    client.update_document('messages', 'm1', {'read': True})

    method, url = http.request.call_args.args
    assert (method, url) == ('PATCH', f"{ROOT}/messages/m1")
    params = http.request.call_args.kwargs['params']
    assert ('updateMask.fieldPaths', 'read') in params
    assert ('currentDocument.exists', 'true') in params


def test_delete(client, http):
    http.request.return_value = make_response(body={})

    client.delete_document('skills', 's1')

    assert http.request.call_args.args == ('DELETE', f"{ROOT}/skills/s1")


def test_error_status_is_reported(client, http):
    http.request.return_value = make_response(403, body={
        'error': {'code': 403, 'status': 'PERMISSION_DENIED',
                  'message': 'Missing or insufficient permissions.'}})

    with pytest.raises(DocumentStoreError) as exc_info:
        client.add_document('projects', {'title': 'App'})

    assert exc_info.value.code == 'permission_denied'
    assert exc_info.value.status == 403


def test_error_without_json_body(client, http):
    http.request.return_value = make_response(502, body=ValueError('no json'), text='Bad Gateway')

    with pytest.raises(DocumentStoreError) as exc_info:
        client.query_collection('projects')
    assert exc_info.value.code == 'unknown'


def test_network_failure(client, http):
    http.request.side_effect = requests.exceptions.ConnectionError('down')

    with pytest.raises(DocumentStoreError) as exc_info:
        client.query_collection('projects')
    assert exc_info.value.code == 'unavailable'


def test_requires_project_id():
    with pytest.raises(ValueError):
        FirestoreClient('')
