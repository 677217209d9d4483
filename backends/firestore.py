"""
Firestore Client - Document database over the Firestore REST API

Reads are addressed with the project's web API key; writes also carry the
signed-in user's ID token so the database's security rules can check it.
"""

import re
from datetime import datetime, timezone

import requests
from flask import current_app

from .base import Document, DocumentStore, DocumentStoreError

FIRESTORE_URL = 'https://firestore.googleapis.com/v1'

_FRACTION = re.compile(r'\.(\d+)')


def parse_timestamp(value):
    """Parse an RFC 3339 timestamp (nanosecond precision, 'Z' suffix)"""
    text = value.replace('Z', '+00:00')
    # datetime only keeps microseconds
    text = _FRACTION.sub(lambda m: '.' + m.group(1)[:6].ljust(6, '0'), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value):
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def encode_value(value):
    """Encode a Python value as a Firestore typed value"""
    if value is None:
        return {'nullValue': None}
    if isinstance(value, bool):
        return {'booleanValue': value}
    if isinstance(value, int):
        return {'integerValue': str(value)}
    if isinstance(value, float):
        return {'doubleValue': value}
    if isinstance(value, datetime):
        return {'timestampValue': format_timestamp(value)}
    if isinstance(value, str):
        return {'stringValue': value}
    if isinstance(value, (list, tuple)):
        return {'arrayValue': {'values': [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {'mapValue': {'fields': encode_fields(value)}}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def decode_value(value):
    """Decode a Firestore typed value into a Python value"""
    if 'nullValue' in value:
        return None
    if 'booleanValue' in value:
        return value['booleanValue']
    if 'integerValue' in value:
        return int(value['integerValue'])
    if 'doubleValue' in value:
        return float(value['doubleValue'])
    if 'timestampValue' in value:
        return parse_timestamp(value['timestampValue'])
    if 'stringValue' in value:
        return value['stringValue']
    if 'arrayValue' in value:
        return [decode_value(v) for v in value['arrayValue'].get('values', [])]
    if 'mapValue' in value:
        return decode_fields(value['mapValue'].get('fields', {}))
    # referenceValue, geoPointValue, bytesValue are passed through untouched
    return next(iter(value.values()), None)


def encode_fields(data):
    return {key: encode_value(val) for key, val in data.items()}


def decode_fields(fields):
    return {key: decode_value(val) for key, val in (fields or {}).items()}


def _quote_field_path(path):
    if re.match(r'^[A-Za-z_][A-Za-z0-9_]*$', path):
        return path
    return '`' + path.replace('\\', '\\\\').replace('`', '\\`') + '`'


class FirestoreClient(DocumentStore):
    """Firestore REST client implementing the document store interface"""

    def __init__(self, project_id, api_key=None, token_getter=None,
                 timeout=None, database='(default)', http=None):
        if not project_id:
            raise ValueError('A Firebase project id is required for Firestore')
        self.project_id = project_id
        self.api_key = api_key
        self.token_getter = token_getter
        self.timeout = timeout
        self.http = http or requests.Session()
        self.root = f"projects/{project_id}/databases/{database}/documents"

    def _url(self, path=''):
        return f"{FIRESTORE_URL}/{self.root}{path}"

    def _request(self, method, url, **kwargs):
        params = kwargs.pop('params', None) or []
        if isinstance(params, dict):
            params = list(params.items())
        if self.api_key:
            params.append(('key', self.api_key))

        headers = {}
        token = self.token_getter() if self.token_getter else None
        if token:
            headers['Authorization'] = f"Bearer {token}"

        try:
            response = self.http.request(method, url, params=params, headers=headers,
                                         timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise DocumentStoreError(f"Firestore request failed: {str(e)}",
                                     code='unavailable') from e

        if response.status_code >= 400:
            code, message = 'unknown', response.text[:200]
            try:
                error = response.json()
                if isinstance(error, list):
                    error = error[0]
                error = error.get('error', {})
                code = (error.get('status') or code).lower()
                message = error.get('message') or message
            except ValueError:
                pass
            raise DocumentStoreError(f"Firestore error {response.status_code}: {message}",
                                     code=code, status=response.status_code)
        return response

    @staticmethod
    def _document_id(name):
        return name.rsplit('/', 1)[-1]

    def query_collection(self, name, order_by=None, descending=True):
        structured_query = {'from': [{'collectionId': name}]}
        if order_by:
            structured_query['orderBy'] = [{
                'field': {'fieldPath': _quote_field_path(order_by)},
                'direction': 'DESCENDING' if descending else 'ASCENDING',
            }]

        response = self._request('POST', self._url(':runQuery'),
                                 json={'structuredQuery': structured_query})

        documents = []
        for row in response.json():
            doc = row.get('document')
            if not doc:
                # Result rows without a document only carry readTime
                continue
            documents.append(Document(id=self._document_id(doc['name']),
                                      data=decode_fields(doc.get('fields'))))
        return documents

    def add_document(self, collection, fields):
        response = self._request('POST', self._url(f"/{collection}"),
                                 json={'fields': encode_fields(fields)})
        document_id = self._document_id(response.json()['name'])
        current_app.logger.info(f"Firestore: created {collection}/{document_id}")
        return document_id

    def update_document(self, collection, document_id, fields):
        params = [('updateMask.fieldPaths', _quote_field_path(key)) for key in fields]
        params.append(('currentDocument.exists', 'true'))
        self._request('PATCH', self._url(f"/{collection}/{document_id}"),
                      params=params, json={'fields': encode_fields(fields)})
        current_app.logger.info(f"Firestore: updated {collection}/{document_id}")

    def delete_document(self, collection, document_id):
        self._request('DELETE', self._url(f"/{collection}/{document_id}"))
        current_app.logger.info(f"Firestore: deleted {collection}/{document_id}")
