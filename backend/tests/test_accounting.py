"""
Aggregate arithmetic shared by the API and the sync store.
"""

import pytest

from sentra import accounting
from sentra.accounting import ClientTotals


@pytest.mark.parametrize(
    "amount,paid,status",
    [
        (1000, 0, "Pending"),
        (1000, 400, "Partial"),
        (1000, 1000, "Paid"),
        (1000, 1200, "Paid"),
    ],
)
def test_invoice_status(amount, paid, status):
    assert accounting.invoice_status(amount, paid) == status


def test_payment_then_reversal():
    after = accounting.invoice_after_payment(1000, 0, 400)
    assert (after.paid, after.due, after.status) == (400, 600, "Partial")

    reversed_ = accounting.invoice_after_payment(1000, after.paid, -400)
    assert (reversed_.paid, reversed_.due, reversed_.status) == (0, 1000, "Pending")


def test_client_balance_never_negative():
    totals = ClientTotals(total_sales=100, total_collection=0, balance=100, invoice_count=1)
    after = accounting.client_after_payment(totals, 250)
    assert after.balance == 0
    assert after.total_collection == 250


def test_invoice_removed_reverses_sales_and_due():
    totals = ClientTotals(total_sales=1000, total_collection=400, balance=600, invoice_count=1)
    after = accounting.client_after_invoice_removed(totals, 1000, 600)
    assert (after.total_sales, after.total_collection, after.balance, after.invoice_count) == (0, 400, 0, 0)


def test_money_rounding():
    after = accounting.invoice_after_payment(0.3, 0.1, 0.2)
    assert after.due == 0
    assert after.status == "Paid"
