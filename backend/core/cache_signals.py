"""
Cache invalidation signals
Drop cached project statistics when any financial record changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_project_stats, invalidate_predictions_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Models whose rows feed project statistics, with the fields pointing at projects
PROJECT_FINANCIAL_MODELS = {
    'FundTransfer': ('project_id',),
    'ProjectFundTransfer': ('from_project_id', 'to_project_id'),
    'WorkerAttendance': ('project_id',),
    'WorkerTransfer': ('project_id',),
    'WorkerMiscExpense': ('project_id',),
    'MaterialPurchase': ('project_id',),
    'TransportationExpense': ('project_id',),
    'SupplierPayment': ('project_id',),
}

EQUIPMENT_MODELS = ('Equipment', 'EquipmentMaintenance', 'EquipmentUsage', 'EquipmentMovement')


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_project_stats_cache(sender, instance, **kwargs):
    """Invalidate cached project stats when a financial record changes"""
    if is_suspended():
        return

    fields = PROJECT_FINANCIAL_MODELS.get(sender.__name__)
    if not fields:
        return
    try:
        invalidate_project_stats(*[getattr(instance, f, None) for f in fields])
    except Exception as e:
        logger.warning(f"Error in invalidate_project_stats_cache signal: {e}")


@receiver([post_save, post_delete])
def invalidate_equipment_cache(sender, instance, **kwargs):
    """Invalidate cached maintenance predictions when equipment data changes"""
    if is_suspended():
        return

    if sender.__name__ in EQUIPMENT_MODELS:
        try:
            invalidate_predictions_cache()
        except Exception as e:
            logger.warning(f"Error in invalidate_equipment_cache signal: {e}")
