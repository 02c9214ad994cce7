"""
Batch allocation for picking.

Pure helpers that decide how many units to take from which batch. Nothing
here touches the database; callers pass batches already in FEFO order
(oldest first) and get plain dictionaries back.

Selections are a dict of ``batch_id -> BatchSelection`` in selection order.
Every helper returns a new dict and leaves its input untouched.
"""
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, Optional


@dataclass(frozen=True)
class BatchAvailability:
    """A batch offered to the picker"""
    batch_id: int
    available: int
    batch_number: str = ''
    location: Optional[str] = None
    status: Optional[str] = None

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class BatchSelection:
    """Units chosen from one batch"""
    batch_id: int
    quantity: int
    max_available: int

    def to_dict(self):
        return asdict(self)


def _as_count(value) -> int:
    """Coerce a quantity to a non-negative int; junk becomes 0"""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def suggest_allocation(target, batches: Iterable[BatchAvailability]) -> Dict[int, int]:
    """
    Greedy allocation over batches in the order given.

    Takes ``min(remaining, available)`` from each batch until the target is
    met or the batches run out. Batches with nothing available are skipped,
    so the result never holds zero entries. The allocated total is
    ``min(target, total available)``; a shortfall is not an error.
    """
    remaining = _as_count(target)
    allocation: Dict[int, int] = {}
    if remaining == 0:
        return allocation

    for batch in batches:
        if remaining == 0:
            break
        available = _as_count(batch.available)
        if available == 0:
            continue
        take = min(remaining, available)
        allocation[batch.batch_id] = allocation.get(batch.batch_id, 0) + take
        remaining -= take

    return allocation


def allocation_to_selections(allocation: Dict[int, int], batches: Iterable[BatchAvailability]) -> Dict[int, BatchSelection]:
    """Turn a suggested allocation into selections, keeping batch order"""
    selections: Dict[int, BatchSelection] = {}
    for batch in batches:
        quantity = allocation.get(batch.batch_id)
        if quantity:
            selections[batch.batch_id] = BatchSelection(
                batch_id=batch.batch_id,
                quantity=quantity,
                max_available=_as_count(batch.available),
            )
    return selections


def total_selected(selections: Dict[int, BatchSelection]) -> int:
    return sum(selection.quantity for selection in selections.values())


def toggle_batch(selections: Dict[int, BatchSelection], batch: BatchAvailability, target) -> Dict[int, BatchSelection]:
    """
    Deselect the batch if selected, otherwise select what is still needed from it.

    Nothing is added when the target is already covered.
    """
    updated = dict(selections)
    if batch.batch_id in updated:
        del updated[batch.batch_id]
        return updated

    remaining = max(0, _as_count(target) - total_selected(updated))
    available = _as_count(batch.available)
    quantity = min(remaining, available)
    if quantity > 0:
        updated[batch.batch_id] = BatchSelection(batch_id=batch.batch_id, quantity=quantity, max_available=available)
    return updated


def set_batch_quantity(selections: Dict[int, BatchSelection], batch_id, quantity) -> Dict[int, BatchSelection]:
    """Set the quantity of a selected batch, clamped to [0, max_available]; 0 removes it"""
    updated = dict(selections)
    selection = updated.get(batch_id)
    if selection is None:
        return updated

    clamped = min(_as_count(quantity), selection.max_available)
    if clamped == 0:
        del updated[batch_id]
    else:
        updated[batch_id] = BatchSelection(batch_id=batch_id, quantity=clamped, max_available=selection.max_available)
    return updated


def fill_from_batch(selections: Dict[int, BatchSelection], batch: BatchAvailability, target) -> Dict[int, BatchSelection]:
    """Top up one batch's selection with whatever is still needed, up to its availability"""
    updated = dict(selections)
    remaining = max(0, _as_count(target) - total_selected(updated))
    available = _as_count(batch.available)
    existing = updated.get(batch.batch_id)
    current = existing.quantity if existing else 0
    extra = min(remaining, available - current)
    if extra > 0:
        updated[batch.batch_id] = BatchSelection(batch_id=batch.batch_id, quantity=current + extra, max_available=available)
    return updated


def summarize_selection(selections: Dict[int, BatchSelection], target) -> dict:
    """Progress figures for a set of selections against the target quantity"""
    target = _as_count(target)
    total = total_selected(selections)
    # percent rounded half up
    progress = min(100, (200 * total + target) // (2 * target)) if target > 0 else 0
    return {
        'target': target,
        'total_selected': total,
        'progress': progress,
        'is_short': 0 < total < target,
        'is_complete': total >= target,
        'can_submit': total > 0,
        'short_by': max(0, target - total),
    }
