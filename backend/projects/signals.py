"""
Keep daily summaries in step with the records that feed them.

Every tracked model lists the (project field, date field) pairs it touches.
``pre_save`` remembers the stored pairs so that an update moving a record to
another day (or project) refreshes both the old and the new summary.
"""
import threading

from django.apps import apps
from django.db.models.signals import pre_save, post_save, pre_delete, post_delete

from .services import refresh_daily_summaries

_thread_locals = threading.local()

TRACKED_MODELS = {
    'projects.FundTransfer': [('project_id', 'transfer_date')],
    'projects.ProjectFundTransfer': [('from_project_id', 'transfer_date'), ('to_project_id', 'transfer_date')],
    'workers.WorkerAttendance': [('project_id', 'date')],
    'workers.WorkerTransfer': [('project_id', 'transfer_date')],
    'workers.WorkerMiscExpense': [('project_id', 'date')],
    'purchasing.MaterialPurchase': [('project_id', 'purchase_date')],
    'purchasing.TransportationExpense': [('project_id', 'date')],
}


def _deleting_projects():
    if not hasattr(_thread_locals, 'deleting_projects'):
        _thread_locals.deleting_projects = set()
    return _thread_locals.deleting_projects


def mark_project_deleting(sender, instance, **kwargs):
    """Records of a project being deleted must not recreate its summaries"""
    _deleting_projects().add(instance.pk)


def unmark_project_deleting(sender, instance, **kwargs):
    _deleting_projects().discard(instance.pk)


def _pairs(instance, field_pairs):
    return {(getattr(instance, p), getattr(instance, d)) for p, d in field_pairs}


def _make_handlers(field_pairs):
    def remember_original(sender, instance, **kwargs):
        instance._summary_pairs = set()
        if instance.pk is None:
            return
        original = sender.objects.filter(pk=instance.pk).first()
        if original is not None:
            instance._summary_pairs = _pairs(original, field_pairs)

    def refresh_after_save(sender, instance, **kwargs):
        pairs = _pairs(instance, field_pairs) | getattr(instance, '_summary_pairs', set())
        refresh_daily_summaries(pairs)

    def refresh_after_delete(sender, instance, **kwargs):
        deleting = _deleting_projects()
        pairs = {(p, d) for p, d in _pairs(instance, field_pairs) if p not in deleting}
        refresh_daily_summaries(pairs)

    return remember_original, refresh_after_save, refresh_after_delete


def connect_summary_signals():
    for label, field_pairs in TRACKED_MODELS.items():
        model = apps.get_model(label)
        remember_original, refresh_after_save, refresh_after_delete = _make_handlers(field_pairs)
        uid = f'daily_summary:{label}'
        pre_save.connect(remember_original, sender=model, weak=False, dispatch_uid=f'{uid}:pre')
        post_save.connect(refresh_after_save, sender=model, weak=False, dispatch_uid=f'{uid}:save')
        post_delete.connect(refresh_after_delete, sender=model, weak=False, dispatch_uid=f'{uid}:delete')

    project_model = apps.get_model('projects', 'Project')
    pre_delete.connect(mark_project_deleting, sender=project_model, dispatch_uid='daily_summary:project:pre_delete')
    post_delete.connect(unmark_project_deleting, sender=project_model, dispatch_uid='daily_summary:project:post_delete')
