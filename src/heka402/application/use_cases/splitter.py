"""Partition a payment amount across chains."""

from __future__ import annotations

from typing import Sequence

from ...domain.entities import PaymentPlan, PlanEntry
from ...domain.errors import InvalidSplitError


def split_payment(total_amount: int, chain_ids: Sequence[int]) -> PaymentPlan:
    """Split ``total_amount`` evenly across ``chain_ids`` with exact integer sums.

    Every chain receives ``total_amount // n``; the entry at index 0 also takes the
    whole remainder ``total_amount % n``, so ``plan.total == total_amount`` for any
    ``n >= 1``.

    Example (100 over three chains): ``[(A, 34), (B, 33), (C, 33)]``.

    Raises:
        InvalidSplitError: If the chain list is empty or the amount is negative.
    """
    count = len(chain_ids)
    if count == 0:
        raise InvalidSplitError("Cannot split a payment across zero chains")
    if isinstance(total_amount, bool) or not isinstance(total_amount, int):
        raise InvalidSplitError(f"Total amount must be an integer: {total_amount!r}")
    if total_amount < 0:
        raise InvalidSplitError(f"Total amount must be >= 0. Got {total_amount}")

    base, remainder = divmod(total_amount, count)
    entries = [
        PlanEntry(chain_id=chain_id, amount=base + remainder if i == 0 else base)
        for i, chain_id in enumerate(chain_ids)
    ]
    return PaymentPlan(entries=tuple(entries))
