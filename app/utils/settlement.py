"""Settlement arithmetic for sales and debt payments."""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.core.errors import (
    InvalidAmountError,
    InvalidInputError,
    InsufficientPaymentError,
    OverPaymentError,
)
from app.models.debt import DebtInDB, DebtStatus
from app.schemas.debt import MemberDebtSummary
from app.schemas.sale import LineItemCreate


def validate_line_items(line_items: Sequence[LineItemCreate]) -> None:
    """
    Validate sale line items.

    Rules:
    - at least one line item
    - quantity must be positive
    - sell_price and cost_price must be non-negative
    """
    if not line_items:
        raise InvalidInputError("A sale needs at least one line item")

    for item in line_items:
        if item.quantity <= 0:
            raise InvalidInputError(
                f"Line item '{item.product_id}' has non-positive quantity: {item.quantity}"
            )
        if item.sell_price < 0:
            raise InvalidInputError(
                f"Line item '{item.product_id}' has negative sell price: {item.sell_price}"
            )
        if item.cost_price < 0:
            raise InvalidInputError(
                f"Line item '{item.product_id}' has negative cost price: {item.cost_price}"
            )


def line_subtotal(sell_price: int, quantity: int) -> int:
    return sell_price * quantity


def calculate_total(line_items: Iterable[LineItemCreate]) -> int:
    """Sale total from unit prices and quantities."""
    return sum(line_subtotal(item.sell_price, item.quantity) for item in line_items)


def calculate_change(total: int, amount_tendered: Optional[int]) -> Tuple[int, int]:
    """
    Return (amount_tendered, change_given) for a cash sale.

    An omitted tendered amount means exact payment.
    """
    if amount_tendered is None:
        return total, 0
    if amount_tendered < total:
        raise InsufficientPaymentError(
            f"Amount tendered ({amount_tendered}) is less than the total ({total})"
        )
    return amount_tendered, max(0, amount_tendered - total)


def clamp_stock(current_stock: int, quantity: int) -> int:
    """Stock after selling quantity units, never below zero."""
    return max(0, current_stock - quantity)


def debt_status_for(remaining_amount: int) -> DebtStatus:
    return DebtStatus.PAID if remaining_amount <= 0 else DebtStatus.UNPAID


def validate_payment_amount(amount: Optional[int], remaining_amount: int) -> None:
    """
    Check a payment against the debt's remaining balance.

    Rules:
    - amount must be a positive number
    - amount must not exceed what is still owed
    """
    if amount is None or isinstance(amount, bool) or amount <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount}")
    if amount > remaining_amount:
        raise OverPaymentError(
            f"Payment of {amount} exceeds the remaining balance of {remaining_amount}"
        )


def next_debt_state(original_amount: int, amount_paid: int, amount: int) -> Tuple[int, int, DebtStatus]:
    """Return (amount_paid, remaining_amount, status) after paying amount."""
    new_paid = amount_paid + amount
    remaining = max(0, original_amount - new_paid)
    return new_paid, remaining, debt_status_for(remaining)


def summarize_debts_by_member(debts: Iterable[DebtInDB]) -> List[MemberDebtSummary]:
    """
    Group debts by member and total them.

    Status per member:
    - paid: nothing remains
    - partial: something paid, something remains
    - unpaid: nothing paid yet
    Output is sorted by member_id so it does not depend on input order.
    """
    groups: Dict[str, Dict] = {}
    for debt in debts:
        group = groups.setdefault(debt.member_id, {
            "member_name": debt.member_name,
            "debt_count": 0,
            "total_original": 0,
            "total_paid": 0,
            "total_remaining": 0,
        })
        if not group["member_name"]:
            group["member_name"] = debt.member_name
        group["debt_count"] += 1
        group["total_original"] += debt.original_amount
        group["total_paid"] += debt.amount_paid
        group["total_remaining"] += debt.remaining_amount

    summaries = []
    for member_id in sorted(groups):
        group = groups[member_id]
        if group["total_remaining"] <= 0:
            status = "paid"
        elif group["total_paid"] > 0:
            status = "partial"
        else:
            status = "unpaid"
        summaries.append(MemberDebtSummary(member_id=member_id, status=status, **group))
    return summaries
