"""Supplier account calculations"""
import logging
from decimal import Decimal

from django.db.models import Q, Sum

from .models import Supplier, SupplierPayment

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def supplier_purchases(supplier):
    """Purchases linked by FK, or by name when entered without a supplier record"""
    from backend.purchasing.models import MaterialPurchase
    return MaterialPurchase.objects.filter(
        Q(supplier=supplier) | Q(supplier__isnull=True, supplier_name__iexact=supplier.name)
    ).select_related('material', 'project')


def refresh_supplier_debt(supplier_id):
    """total_debt = credit purchases - payments"""
    supplier = Supplier.objects.filter(pk=supplier_id).first()
    if supplier is None:
        return None
    credit = supplier_purchases(supplier).filter(purchase_type='credit').aggregate(
        total=Sum('total_amount')
    )['total'] or ZERO
    paid = supplier.payments.aggregate(total=Sum('amount'))['total'] or ZERO
    Supplier.objects.filter(pk=supplier.pk).update(total_debt=credit - paid)
    logger.debug(f"Supplier {supplier.pk} debt refreshed: {credit - paid}")
    return credit - paid


def _apply_filters(queryset, date_field, project_id=None, date_from=None, date_to=None):
    if project_id:
        queryset = queryset.filter(project_id=project_id)
    if date_from:
        queryset = queryset.filter(**{f'{date_field}__gte': date_from})
    if date_to:
        queryset = queryset.filter(**{f'{date_field}__lte': date_to})
    return queryset


def get_supplier_statement(supplier, project_id=None, date_from=None, date_to=None):
    """
    Purchases and payments of a supplier with totals and a running ledger.

    Only credit purchases add to the debt; cash and supply purchases are
    listed for completeness.
    """
    purchases = _apply_filters(
        supplier_purchases(supplier), 'purchase_date', project_id, date_from, date_to
    ).order_by('purchase_date', 'id')
    payments = _apply_filters(
        SupplierPayment.objects.filter(supplier=supplier).select_related('project'),
        'payment_date', project_id, date_from, date_to
    ).order_by('payment_date', 'id')

    cash = purchases.filter(purchase_type='cash').aggregate(total=Sum('total_amount'))['total'] or ZERO
    credit = purchases.filter(purchase_type='credit').aggregate(total=Sum('total_amount'))['total'] or ZERO
    supply = purchases.filter(purchase_type='supply').aggregate(total=Sum('total_amount'))['total'] or ZERO
    paid = payments.aggregate(total=Sum('amount'))['total'] or ZERO

    entries = []
    for purchase in purchases:
        entries.append({
            'date': purchase.purchase_date,
            'kind': 'purchase',
            'id': purchase.id,
            'description': f"{purchase.material.name} ({purchase.quantity} {purchase.material.unit})",
            'purchase_type': purchase.purchase_type,
            'project': purchase.project.name,
            'invoice_number': purchase.invoice_number,
            'debit': purchase.total_amount if purchase.purchase_type == 'credit' else ZERO,
            'credit': ZERO,
            'amount': purchase.total_amount,
        })
    for payment in payments:
        entries.append({
            'date': payment.payment_date,
            'kind': 'payment',
            'id': payment.id,
            'description': payment.notes or payment.get_payment_method_display(),
            'purchase_type': None,
            'project': payment.project.name if payment.project else None,
            'invoice_number': payment.reference_number,
            'debit': ZERO,
            'credit': payment.amount,
            'amount': payment.amount,
        })
    entries.sort(key=lambda e: (e['date'], 0 if e['kind'] == 'purchase' else 1, e['id']))

    running = ZERO
    for entry in entries:
        running += entry['debit'] - entry['credit']
        entry['running_balance'] = running

    return {
        'purchases': purchases,
        'payments': payments,
        'ledger': entries,
        'totals': {
            'cashPurchases': cash,
            'creditPurchases': credit,
            'supplyPurchases': supply,
            'totalPurchases': cash + credit + supply,
            'totalDebt': credit,
            'totalPaid': paid,
            'remainingDebt': credit - paid,
        },
    }


def get_supplier_statistics(supplier_id=None, project_id=None, date_from=None, date_to=None, purchase_type=None):
    """Totals across suppliers, narrowed by the same filters as the purchase list"""
    from backend.purchasing.models import MaterialPurchase

    suppliers = Supplier.objects.filter(is_active=True)
    purchases = MaterialPurchase.objects.all()
    payments = SupplierPayment.objects.all()

    if supplier_id:
        supplier = Supplier.objects.filter(pk=supplier_id).first()
        suppliers = Supplier.objects.filter(pk=supplier_id)
        if supplier is not None:
            purchases = supplier_purchases(supplier)
        else:
            purchases = purchases.none()
        payments = payments.filter(supplier_id=supplier_id)
    else:
        purchases = purchases.filter(Q(supplier__isnull=False) | ~Q(supplier_name=''))

    purchases = _apply_filters(purchases, 'purchase_date', project_id, date_from, date_to)
    payments = _apply_filters(payments, 'payment_date', project_id, date_from, date_to)
    if purchase_type:
        purchases = purchases.filter(purchase_type=purchase_type)

    cash = purchases.filter(purchase_type='cash').aggregate(total=Sum('total_amount'))['total'] or ZERO
    credit = purchases.filter(purchase_type='credit').aggregate(total=Sum('total_amount'))['total'] or ZERO
    paid = payments.aggregate(total=Sum('amount'))['total'] or ZERO

    return {
        'totalSuppliers': suppliers.count(),
        'totalCashPurchases': cash,
        'totalCreditPurchases': credit,
        'totalDebt': credit,
        'totalPaid': paid,
        'remainingDebt': credit - paid,
        'activeSuppliers': suppliers.filter(total_debt__gt=0).count(),
    }
