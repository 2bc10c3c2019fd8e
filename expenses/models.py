"""
Expenses — Models

Money spent outside the stock ledger: rent, salaries, loans,
equipment. Expenses never move stock.

@file expenses/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import DECIMAL_MAX_DIGITS, DECIMAL_PLACES
from core.models import TrackedModel


class Expense(TrackedModel):

    class CategoryChoices(models.TextChoices):
        OPERATING = 'operating', _('Operating Expenses')
        NON_OPERATING = 'non_operating', _('Non-Operating Expenses')
        CAPITAL = 'capital', _('Capital Expenses')

    title = models.CharField(_('title'), max_length=255)
    category = models.CharField(
        _('category'), max_length=20,
        choices=CategoryChoices.choices, db_index=True,
    )
    amount = models.DecimalField(
        _('amount'), max_digits=DECIMAL_MAX_DIGITS, decimal_places=DECIMAL_PLACES,
    )
    description = models.TextField(_('description'), blank=True)

    class Meta:
        verbose_name = _('expense')
        verbose_name_plural = _('expenses')
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['title'],
                condition=models.Q(is_deleted=False),
                name='unique_active_expense_title',
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name='expense_amount_non_negative',
            ),
        ]

    def __str__(self):
        return f'{self.title} ({self.amount})'
