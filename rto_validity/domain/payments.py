"""Fee and balance rules shared by permits and licences"""

from rto_validity.domain.exceptions import ValidationError
from rto_validity.domain.models import Payment


def settle_payment(total: int, paid: int) -> Payment:
    """
    Build a payment ledger from form amounts.

    Negative amounts are rejected. A paid amount above a positive total is
    capped at the total, so the balance never goes negative.
    """
    if total < 0:
        raise ValidationError("Total fee cannot be negative", field="total_fee")
    if paid < 0:
        raise ValidationError("Paid amount cannot be negative", field="paid")

    if total > 0 and paid > total:
        paid = total

    return Payment(total=total, paid=paid)


def mark_paid(payment: Payment) -> Payment:
    """Clear the outstanding balance"""
    return Payment(total=payment.total, paid=max(payment.total, payment.paid))
