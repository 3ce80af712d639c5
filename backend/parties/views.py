from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404

from backend.core.utils import create_audit_log, money, parse_date
from backend.purchasing.models import normalize_purchase_type
from .models import Supplier, SupplierPayment
from .serializers import SupplierSerializer, SupplierPaymentSerializer
from .services import get_supplier_statement, get_supplier_statistics, refresh_supplier_debt


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        queryset = Supplier.objects.all().order_by('name')
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(phone__icontains=search) |
                Q(contact_person__icontains=search)
            )
        is_active = request.query_params.get('is_active', None)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() in ('true', '1'))
        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            supplier = serializer.save()
            # Purchases entered earlier under this name now count towards the debt
            refresh_supplier_debt(supplier.id)
            supplier.refresh_from_db()
            create_audit_log(
                request=request, action='create', model_name='Supplier',
                object_id=supplier.id, object_name=supplier.name
            )
            return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            refresh_supplier_debt(supplier.id)
            supplier.refresh_from_db()
            create_audit_log(
                request=request, action='update', model_name='Supplier',
                object_id=supplier.id, object_name=supplier.name, changes=dict(request.data)
            )
            return Response(SupplierSerializer(supplier).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='Supplier',
            object_id=supplier.id, object_name=supplier.name
        )
        supplier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_account_statement(request, pk):
    """Purchases and payments of a supplier with a running balance"""
    supplier = get_object_or_404(Supplier, pk=pk)
    project_id = request.query_params.get('project', None)
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    from backend.purchasing.serializers import MaterialPurchaseSerializer
    statement = get_supplier_statement(supplier, project_id, date_from, date_to)

    ledger = []
    for entry in statement['ledger']:
        ledger.append({
            **entry,
            'date': entry['date'].isoformat(),
            'debit': money(entry['debit']),
            'credit': money(entry['credit']),
            'amount': money(entry['amount']),
            'running_balance': money(entry['running_balance']),
        })

    return Response({
        'supplier': SupplierSerializer(supplier).data,
        'purchases': MaterialPurchaseSerializer(statement['purchases'], many=True).data,
        'payments': SupplierPaymentSerializer(statement['payments'], many=True).data,
        'ledger': ledger,
        'totals': {key: money(value) for key, value in statement['totals'].items()},
        'final_balance': ledger[-1]['running_balance'] if ledger else '0.00',
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_statistics(request):
    """Cash/credit purchase totals and remaining debt across suppliers"""
    purchase_type = request.query_params.get('purchase_type', None)
    stats = get_supplier_statistics(
        supplier_id=request.query_params.get('supplier', None),
        project_id=request.query_params.get('project', None),
        date_from=parse_date(request.query_params.get('date_from', None)),
        date_to=parse_date(request.query_params.get('date_to', None)),
        purchase_type=normalize_purchase_type(purchase_type) if purchase_type else None,
    )
    return Response({
        key: value if isinstance(value, int) else money(value)
        for key, value in stats.items()
    })


# Supplier payment views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_payment_list_create(request):
    """List supplier payments or record a new one"""
    if request.method == 'GET':
        queryset = SupplierPayment.objects.select_related('supplier', 'project', 'created_by').all()
        supplier_id = request.query_params.get('supplier', None)
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)
        project_id = request.query_params.get('project', None)
        if project_id:
            queryset = queryset.filter(project_id=project_id)
        serializer = SupplierPaymentSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierPaymentSerializer(data=request.data)
        if serializer.is_valid():
            payment = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='supplier_payment', model_name='SupplierPayment',
                object_id=payment.id, object_name=str(payment),
                changes={'supplier': payment.supplier_id, 'amount': payment.amount}
            )
            return Response(SupplierPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_payment_detail(request, pk):
    """Retrieve, update or delete a supplier payment"""
    payment = get_object_or_404(SupplierPayment, pk=pk)

    if request.method == 'GET':
        return Response(SupplierPaymentSerializer(payment).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierPaymentSerializer(payment, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='SupplierPayment',
                object_id=payment.id, object_name=str(payment), changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='SupplierPayment',
            object_id=payment.id, object_name=str(payment)
        )
        payment.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
