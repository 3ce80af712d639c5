"""Keep Supplier.total_debt in step with purchases and payments"""
from django.db.models.signals import pre_save, post_save, post_delete
from django.dispatch import receiver

from .models import Supplier
from .services import refresh_supplier_debt


def _supplier_ids(purchase):
    ids = set()
    if purchase.supplier_id:
        ids.add(purchase.supplier_id)
    elif purchase.supplier_name:
        ids.update(Supplier.objects.filter(name__iexact=purchase.supplier_name).values_list('id', flat=True))
    return ids


@receiver(pre_save, sender='purchasing.MaterialPurchase')
def remember_purchase_supplier(sender, instance, **kwargs):
    instance._original_supplier_ids = set()
    if instance.pk is None:
        return
    original = sender.objects.filter(pk=instance.pk).first()
    if original is not None:
        instance._original_supplier_ids = _supplier_ids(original)


@receiver(post_save, sender='purchasing.MaterialPurchase')
@receiver(post_delete, sender='purchasing.MaterialPurchase')
def refresh_debt_for_purchase(sender, instance, **kwargs):
    for supplier_id in _supplier_ids(instance) | getattr(instance, '_original_supplier_ids', set()):
        refresh_supplier_debt(supplier_id)


@receiver(pre_save, sender='parties.SupplierPayment')
def remember_payment_supplier(sender, instance, **kwargs):
    instance._original_supplier_id = None
    if instance.pk is not None:
        instance._original_supplier_id = (
            sender.objects.filter(pk=instance.pk).values_list('supplier_id', flat=True).first()
        )


@receiver(post_save, sender='parties.SupplierPayment')
@receiver(post_delete, sender='parties.SupplierPayment')
def refresh_debt_for_payment(sender, instance, **kwargs):
    for supplier_id in {instance.supplier_id, getattr(instance, '_original_supplier_id', None)}:
        if supplier_id:
            refresh_supplier_debt(supplier_id)
