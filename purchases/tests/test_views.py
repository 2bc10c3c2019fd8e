"""
Tests — purchases API.

@file purchases/tests/test_views.py
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from stock import selectors
from tests.factories import SupplierFactory, UserFactory, days_from_today, stock_in


pytestmark = pytest.mark.django_db

LIST_URL = reverse('api-v1:purchases:purchase-list')


def _detail(pk, name='purchase-detail'):
    return reverse(f'api-v1:purchases:{name}', args=[pk])


def _payload(product, warehouse, **overrides):
    payload = {
        'invoice_number': 'PUR-API-1',
        'purchase_date': days_from_today(0).isoformat(),
        'items': [{
            'product': str(product.pk),
            'warehouse': str(warehouse.pk),
            'quantity': '10',
            'unit_price': '4.00',
        }],
    }
    payload.update(overrides)
    return payload


class TestCreate:

    def test_walk_in_purchase_posts_stock(self, admin_client, product, warehouse):
        resp = admin_client.post(LIST_URL, _payload(product, warehouse, supplier_name='Market'), format='json')
        assert resp.status_code == status.HTTP_201_CREATED
        assert resp.data['status'] == 'received'
        assert resp.data['grand_total'] == Decimal('40.00')
        assert len(resp.data['items']) == 1
        assert selectors.get_product_total(product.pk) == Decimal('10')

    def test_supplier_purchase_pending(self, admin_client, product, warehouse):
        supplier = SupplierFactory()
        resp = admin_client.post(
            LIST_URL, _payload(product, warehouse, supplier=str(supplier.pk)), format='json',
        )
        assert resp.data['status'] == 'pending'
        assert resp.data['supplier_display'] == supplier.name
        assert selectors.get_product_total(product.pk) == Decimal('0')

    def test_duplicate_invoice_rejected(self, admin_client, product, warehouse):
        admin_client.post(LIST_URL, _payload(product, warehouse), format='json')
        resp = admin_client.post(LIST_URL, _payload(product, warehouse), format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert 'invoice_number' in resp.data['errors']

    def test_empty_items_rejected(self, admin_client, product, warehouse):
        resp = admin_client.post(LIST_URL, _payload(product, warehouse, items=[]), format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST

    def test_needs_permission(self, authenticated_client, product, warehouse):
        resp = authenticated_client.post(LIST_URL, _payload(product, warehouse), format='json')
        assert resp.status_code == status.HTTP_403_FORBIDDEN

    def test_permission_via_model_perm(self, api_client, product, warehouse):
        api_client.force_authenticate(user=UserFactory(permissions=['purchases.change_purchase']))
        resp = api_client.post(LIST_URL, _payload(product, warehouse), format='json')
        assert resp.status_code == status.HTTP_201_CREATED


class TestLifecycle:

    def _pending(self, client, product, warehouse):
        resp = client.post(
            LIST_URL, _payload(product, warehouse, supplier=str(SupplierFactory().pk)), format='json',
        )
        return resp.data['id']

    def test_receive(self, admin_client, product, warehouse):
        pk = self._pending(admin_client, product, warehouse)
        resp = admin_client.post(_detail(pk, 'purchase-receive'))
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['data']['status'] == 'received'
        assert selectors.get_product_total(product.pk) == Decimal('10')

    def test_cancel_then_receive_is_rejected(self, admin_client, product, warehouse):
        pk = self._pending(admin_client, product, warehouse)
        assert admin_client.post(_detail(pk, 'purchase-cancel')).status_code == status.HTTP_200_OK
        resp = admin_client.post(_detail(pk, 'purchase-receive'))
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'INVALID_STATE_TRANSITION'
        assert resp.data['errors']['transition'] == {'from': 'cancelled', 'to': 'received'}

    def test_patch_lines_of_received_purchase(self, admin_client, product, warehouse):
        pk = admin_client.post(LIST_URL, _payload(product, warehouse), format='json').data['id']
        resp = admin_client.patch(_detail(pk), {
            'items': [{'product': str(product.pk), 'warehouse': str(warehouse.pk), 'quantity': '3'}],
        }, format='json')
        assert resp.status_code == status.HTTP_200_OK
        assert selectors.get_product_total(product.pk) == Decimal('3')
        assert resp.data['items'][0]['quantity'] == Decimal('3')

    def test_patch_after_stock_sold_is_conflict(self, admin_client, product, warehouse):
        pk = admin_client.post(LIST_URL, _payload(product, warehouse), format='json').data['id']
        stock_in(product, warehouse, -9, movement_type='sale')
        resp = admin_client.patch(_detail(pk), {
            'items': [{'product': str(product.pk), 'warehouse': str(warehouse.pk), 'quantity': '3'}],
        }, format='json')
        assert resp.status_code == status.HTTP_409_CONFLICT

    def test_delete_reverses(self, admin_client, product, warehouse):
        pk = admin_client.post(LIST_URL, _payload(product, warehouse), format='json').data['id']
        resp = admin_client.delete(_detail(pk))
        assert resp.status_code == status.HTTP_204_NO_CONTENT
        assert selectors.get_product_total(product.pk) == Decimal('0')
        assert admin_client.get(_detail(pk)).status_code == status.HTTP_404_NOT_FOUND

    def test_toggle_status(self, admin_client, product, warehouse):
        pk = admin_client.post(LIST_URL, _payload(product, warehouse), format='json').data['id']
        resp = admin_client.patch(_detail(pk, 'purchase-toggle-status'))
        assert resp.data['data']['is_active'] is False
        active = admin_client.get(reverse('api-v1:purchases:purchase-active'))
        assert active.data['count'] == 0


class TestList:

    def test_filter_by_status_and_date(self, admin_client, product, warehouse):
        admin_client.post(LIST_URL, _payload(product, warehouse), format='json')
        admin_client.post(
            LIST_URL,
            _payload(product, warehouse, invoice_number='PUR-API-2', supplier=str(SupplierFactory().pk),
                     purchase_date=days_from_today(-10).isoformat()),
            format='json',
        )
        assert admin_client.get(LIST_URL, {'status': 'pending'}).data['count'] == 1
        assert admin_client.get(LIST_URL, {'from_date': days_from_today(-1).isoformat()}).data['count'] == 1
        assert admin_client.get(LIST_URL, {'invoice_number': 'api-2'}).data['count'] == 1
