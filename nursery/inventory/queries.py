"""Batch lookups used by picking and allocation"""
from django.db.models import F

from .allocation import BatchAvailability
from .models import Batch


def saleable_batches(org, product=None, variety=None, size=None):
    """
    Batches that can be picked, oldest first.

    A batch is saleable when it has stock and is Ready or Looking Good.
    Ordering by planting date then id gives first-expired-first-out.
    """
    queryset = Batch.objects.filter(
        org=org,
        quantity__gt=0,
        status__in=Batch.SALEABLE_STATUSES,
    ).select_related('location', 'variety', 'size')

    if product is not None:
        queryset = queryset.filter(product=product)
    if variety is not None:
        queryset = queryset.filter(variety=variety)
    if size is not None:
        queryset = queryset.filter(size=size)

    # undated batches go last
    return queryset.order_by(F('planted_at').asc(nulls_last=True), 'id')


def to_availability(batch):
    return BatchAvailability(
        batch_id=batch.id,
        available=batch.quantity,
        batch_number=batch.batch_number,
        location=batch.location.name if batch.location else None,
        status=batch.status,
    )
