from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import models

TWOPLACES = Decimal('0.01')


def compute_profit(cost_total, selling_price):
    """(profit, profit_rate %) for a quotation; rate is 0 when nothing is sold."""
    cost_total = Decimal(cost_total or 0)
    selling_price = Decimal(selling_price or 0)
    profit = selling_price - cost_total
    if selling_price == 0:
        rate = Decimal('0')
    else:
        rate = profit / selling_price * Decimal(100)
    return (
        profit.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
        rate.quantize(TWOPLACES, rounding=ROUND_HALF_UP),
    )


class Quotation(models.Model):
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name='+')
    pol = models.CharField(max_length=100)
    pod = models.CharField(max_length=100)
    destination_name = models.CharField(max_length=255)
    breakdown = models.JSONField(default=dict)
    input = models.JSONField(default=dict)
    excluded_costs = models.JSONField(default=dict, blank=True)
    cost_total = models.DecimalField(max_digits=14, decimal_places=2)
    selling_price = models.DecimalField(max_digits=14, decimal_places=2)
    profit = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    profit_rate = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    carrier = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['created_by', '-created_at'], name='quotes_quotation_owner_idx'),
        ]

    def save(self, *args, **kwargs):
        self.profit, self.profit_rate = compute_profit(self.cost_total, self.selling_price)
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.pol}→{self.pod}→{self.destination_name} ({self.selling_price})"


class CalculationHistory(models.Model):
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, on_delete=models.SET_NULL, related_name='+')
    input = models.JSONField(default=dict)
    result = models.JSONField(default=dict)
    # Requested calculation date (historical lookups) or the day it ran.
    query_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'calculation history'

    def __str__(self):
        return f"Calculation #{self.pk} on {self.query_date}"
