"""
Core — API envelope tests: renderer, exception handler, pagination.

@file core/tests/test_api.py
"""

import json

import pytest
from django.urls import reverse
from rest_framework import status

from core.exceptions import InsufficientStockError, InvalidStateTransition
from core.renderers import StandardJSONRenderer
from tests.factories import CategoryFactory


class TestRenderer:
    def _render(self, data, status_code=200):
        class _Response:
            pass
        response = _Response()
        response.status_code = status_code
        return json.loads(StandardJSONRenderer().render(data, renderer_context={'response': response}))

    def test_wraps_plain_payload(self):
        assert self._render({'a': 1}) == {'success': True, 'data': {'a': 1}}

    def test_moves_page_fields_into_meta(self):
        body = self._render({'count': 1, 'next': None, 'previous': None, 'results': [1], 'product': {'id': 'x'}})
        assert body['data'] == [1]
        assert body['meta']['count'] == 1
        assert body['product'] == {'id': 'x'}

    def test_leaves_enveloped_and_error_payloads(self):
        assert self._render({'success': True, 'data': []}) == {'success': True, 'data': []}
        assert self._render({'detail': 'x'}, status_code=400) == {'detail': 'x'}


class TestDomainExceptions:
    def test_insufficient_stock_is_conflict(self):
        exc = InsufficientStockError(detail='short', requested=3, available=1)
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert (exc.requested, exc.available) == (3, 1)

    def test_invalid_transition_message(self):
        exc = InvalidStateTransition(document_id='p1', from_status='cancelled', to_status='received')
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert str(exc.detail) == 'Cannot transition from cancelled to received.'


@pytest.mark.django_db
class TestErrorEnvelope:
    def test_not_found(self, authenticated_client):
        url = reverse('api-v1:catalog:category-detail', args=['00000000-0000-0000-0000-000000000000'])
        resp = authenticated_client.get(url)
        assert resp.status_code == status.HTTP_404_NOT_FOUND
        assert resp.data['success'] is False
        assert resp.data['code'] == 'RESOURCE_NOT_FOUND'

    def test_rendered_list_envelope(self, authenticated_client):
        CategoryFactory.create_batch(3)
        resp = authenticated_client.get(reverse('api-v1:catalog:category-list'), {'limit': 2})
        body = resp.json()
        assert body['success'] is True
        assert len(body['data']) == 2
        assert body['meta']['count'] == 3
        assert body['meta']['last_page'] == 2

    def test_api_root(self, api_client):
        resp = api_client.get(reverse('api-v1:api-root'))
        assert resp.status_code == status.HTTP_200_OK
        assert 'movements' in resp.data['stock']

    def test_unauthenticated_code(self, api_client):
        resp = api_client.get(reverse('api-v1:catalog:category-list'))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED
        assert resp.data['code'] == 'NOT_AUTHENTICATED'

    def test_serializer_errors_keep_field_named_code(self, admin_client):
        resp = admin_client.post(reverse('api-v1:catalog:warehouse-list'), {'name': 'Main'}, format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'VALIDATION_ERROR'
        assert 'code' in resp.data['errors']
