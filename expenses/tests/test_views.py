"""
Tests — expenses API.

@file expenses/tests/test_views.py
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from expenses.models import Expense
from tests.factories import ExpenseFactory, UserFactory


pytestmark = pytest.mark.django_db

EXPENSES_URL = reverse('api-v1:expenses:expense-list')
BY_CATEGORY_URL = reverse('api-v1:expenses:expense-by-category')


def _detail(expense):
    return reverse('api-v1:expenses:expense-detail', args=[expense.pk])


class TestCreate:

    def _payload(self, *titles, category='operating'):
        return {
            'category': category,
            'items': [{'title': title, 'amount': '150.00'} for title in titles],
        }

    def test_records_a_batch(self, admin_client, admin_user):
        resp = admin_client.post(EXPENSES_URL, self._payload('Rent', 'Water bill'), format='json')
        assert resp.status_code == status.HTTP_201_CREATED
        assert resp.data['count'] == 2
        assert {row['title'] for row in resp.data['data']} == {'Rent', 'Water bill'}
        assert resp.data['data'][0]['category_display'] == 'Operating Expenses'
        assert Expense.objects.filter(created_by=admin_user).count() == 2

    @pytest.mark.parametrize('payload', [
        {'category': 'operating', 'items': []},
        {'category': 'marketing', 'items': [{'title': 'Ads', 'amount': '5'}]},
        {'category': 'operating', 'items': [{'title': 'Ads', 'amount': '-5'}]},
        {'category': 'operating', 'items': [{'title': 'Ads'}]},
    ])
    def test_invalid_body(self, admin_client, payload):
        resp = admin_client.post(EXPENSES_URL, payload, format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert resp.data['code'] == 'VALIDATION_ERROR'
        assert not Expense.objects.exists()

    def test_repeated_title_in_batch(self, admin_client):
        resp = admin_client.post(EXPENSES_URL, self._payload('Rent', 'Rent '), format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert 'items' in resp.data['errors']

    def test_title_already_used(self, admin_client):
        ExpenseFactory(title='Rent')
        resp = admin_client.post(EXPENSES_URL, self._payload('Rent'), format='json')
        assert resp.status_code == status.HTTP_400_BAD_REQUEST
        assert Expense.objects.count() == 1

    def test_needs_model_permission(self, api_client):
        api_client.force_authenticate(user=UserFactory())
        assert api_client.post(EXPENSES_URL, self._payload('Rent'), format='json').status_code == 403
        api_client.force_authenticate(user=UserFactory(permissions=['expenses.add_expense']))
        assert api_client.post(EXPENSES_URL, self._payload('Rent'), format='json').status_code == 201


class TestList:

    def test_total_sum_follows_filters(self, authenticated_client):
        ExpenseFactory(category='operating', amount=Decimal('100.00'))
        ExpenseFactory(category='operating', amount=Decimal('50.25'))
        ExpenseFactory(category='capital', amount=Decimal('4000.00'))

        resp = authenticated_client.get(EXPENSES_URL)
        assert resp.data['count'] == 3
        assert resp.data['total_sum'] == Decimal('4150.25')

        resp = authenticated_client.get(EXPENSES_URL, {'category': 'operating'})
        assert resp.data['count'] == 2
        assert resp.data['total_sum'] == Decimal('150.25')

    def test_total_sum_covers_every_page(self, authenticated_client):
        ExpenseFactory.create_batch(3, amount=Decimal('10.00'))
        resp = authenticated_client.get(EXPENSES_URL, {'limit': 1})
        assert len(resp.data['results']) == 1
        assert resp.data['total_sum'] == Decimal('30.00')

    def test_date_range_on_created_at(self, authenticated_client):
        old = ExpenseFactory(title='Old')
        ExpenseFactory(title='Recent')
        Expense.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))
        since = (timezone.localdate() - timedelta(days=7)).isoformat()

        resp = authenticated_client.get(EXPENSES_URL, {'from_date': since})
        assert [row['title'] for row in resp.data['results']] == ['Recent']
        resp = authenticated_client.get(EXPENSES_URL, {'to_date': since})
        assert [row['title'] for row in resp.data['results']] == ['Old']

    def test_search_title_and_description(self, authenticated_client):
        ExpenseFactory(title='Generator fuel', description='')
        ExpenseFactory(title='Misc', description='diesel for the generator')
        ExpenseFactory(title='Rent', description='')
        resp = authenticated_client.get(EXPENSES_URL, {'search': 'generator'})
        assert resp.data['count'] == 2

    def test_newest_first(self, authenticated_client):
        first = ExpenseFactory(title='First')
        ExpenseFactory(title='Second')
        Expense.objects.filter(pk=first.pk).update(created_at=timezone.now() - timedelta(hours=1))
        resp = authenticated_client.get(EXPENSES_URL)
        assert [row['title'] for row in resp.data['results']] == ['Second', 'First']


class TestByCategory:

    def test_groups_with_totals(self, authenticated_client):
        ExpenseFactory(category='operating', amount=Decimal('20.00'))
        ExpenseFactory(category='operating', amount=Decimal('5.00'))
        ExpenseFactory(category='capital', amount=Decimal('700.00'))
        resp = authenticated_client.get(BY_CATEGORY_URL)
        data = resp.data['data']
        assert set(data) == {'operating', 'capital'}
        assert data['operating']['total'] == Decimal('25.00')
        assert len(data['operating']['items']) == 2
        assert data['capital']['total'] == Decimal('700.00')

    def test_category_filter(self, authenticated_client):
        ExpenseFactory(category='operating')
        ExpenseFactory(category='capital')
        resp = authenticated_client.get(BY_CATEGORY_URL, {'category': 'capital'})
        assert list(resp.data['data']) == ['capital']


class TestChange:

    def test_patch_amount(self, admin_client):
        expense = ExpenseFactory(amount=Decimal('10.00'))
        resp = admin_client.patch(_detail(expense), {'amount': '12.50'}, format='json')
        assert resp.status_code == status.HTTP_200_OK
        assert resp.data['amount'] == Decimal('12.50')
        expense.refresh_from_db()
        assert expense.amount == Decimal('12.50')

    def test_delete_hides_from_list(self, admin_client):
        expense = ExpenseFactory(amount=Decimal('10.00'))
        assert admin_client.delete(_detail(expense)).status_code == status.HTTP_204_NO_CONTENT
        resp = admin_client.get(EXPENSES_URL)
        assert resp.data['count'] == 0
        assert resp.data['total_sum'] == Decimal('0')
        assert Expense.objects.get(pk=expense.pk).is_deleted
