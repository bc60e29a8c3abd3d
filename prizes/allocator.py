"""
Prize inventory allocation.

Stock is reserved with a single conditional UPDATE so concurrent awards
can never take more units than a prize holds.
"""

import logging

from django.db.models import F, Q
from django.utils import timezone

from prizes.models import Prize

logger = logging.getLogger(__name__)


def available_prizes(pool_id, type_id=None):
    """Allocatable prizes in a pool, lowest id first."""
    qs = Prize.objects.filter(
        pool_id=pool_id,
        is_active=True,
        remaining_quantity__gt=0,
    ).filter(
        Q(expiry_date__isnull=True) | Q(expiry_date__gte=timezone.now())
    )
    if type_id is not None:
        qs = qs.filter(prize_type_id=type_id)
    return qs.order_by('id')


def pick_next(pool_id, type_id=None):
    """Return the next allocatable prize in the pool, or None."""
    return available_prizes(pool_id, type_id).first()


def decrement(prize_id):
    """
    Take one unit of stock. Returns False when nothing was left,
    which callers treat as "no prize available".
    """
    updated = Prize.objects.filter(
        pk=prize_id, remaining_quantity__gt=0
    ).update(
        remaining_quantity=F('remaining_quantity') - 1,
        updated_at=timezone.now(),
    )
    if not updated:
        logger.info(f'Decrement rejected: prize={prize_id} has no remaining stock')
    return updated == 1
