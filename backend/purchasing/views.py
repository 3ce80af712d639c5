from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.paginator import Paginator
from django.db.models import Q
from django.shortcuts import get_object_or_404

from backend.core.utils import create_audit_log, parse_positive_int
from .models import Material, MaterialPurchase, TransportationExpense, normalize_purchase_type
from .serializers import MaterialSerializer, MaterialPurchaseSerializer, TransportationExpenseSerializer


# Material views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def material_list_create(request):
    """List materials or add one to the catalogue"""
    if request.method == 'GET':
        queryset = Material.objects.all()
        search = request.query_params.get('search', None)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(category__icontains=search))
        category = request.query_params.get('category', None)
        if category:
            queryset = queryset.filter(category=category)
        serializer = MaterialSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = MaterialSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def material_detail(request, pk):
    """Retrieve, update or delete a material"""
    material = get_object_or_404(Material, pk=pk)

    if request.method == 'GET':
        return Response(MaterialSerializer(material).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MaterialSerializer(material, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if material.purchases.exists():
            return Response(
                {'error': 'لا يمكن حذف مادة مرتبطة بمشتريات'},
                status=status.HTTP_400_BAD_REQUEST
            )
        material.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Material purchase views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def material_purchase_list_create(request):
    """List material purchases (paginated) or record a new purchase"""
    if request.method == 'GET':
        queryset = MaterialPurchase.objects.select_related('material', 'project', 'supplier', 'created_by')

        # Filters
        project = request.query_params.get('project', None)
        supplier = request.query_params.get('supplier', None)
        purchase_type = request.query_params.get('purchase_type', None)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)

        if project:
            queryset = queryset.filter(project_id=project)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        if purchase_type:
            queryset = queryset.filter(purchase_type=normalize_purchase_type(purchase_type))
        if date_from:
            queryset = queryset.filter(purchase_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(purchase_date__lte=date_to)

        queryset = queryset.order_by('-purchase_date', '-id')

        # Pagination
        try:
            page = parse_positive_int(request.query_params.get('page'), 1)
            limit = parse_positive_int(request.query_params.get('limit'), 15, maximum=100)
        except ValueError:
            return Response(
                {'error': 'page and limit must be positive integers'}, status=status.HTTP_400_BAD_REQUEST
            )

        paginator = Paginator(queryset, limit)
        page_obj = paginator.get_page(page)

        serializer = MaterialPurchaseSerializer(page_obj, many=True)
        response = Response({
            'results': serializer.data,
            'count': paginator.count,
            'next': page_obj.next_page_number() if page_obj.has_next() else None,
            'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
            'page': page_obj.number,
            'page_size': limit,
            'total_pages': paginator.num_pages,
        })
        response['Cache-Control'] = 'private, max-age=10, must-revalidate'
        return response
    else:  # POST
        serializer = MaterialPurchaseSerializer(data=request.data)
        if serializer.is_valid():
            purchase = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='material_purchase', model_name='MaterialPurchase',
                object_id=purchase.id, object_name=str(purchase),
                changes={
                    'project': purchase.project_id,
                    'total_amount': purchase.total_amount,
                    'purchase_type': purchase.purchase_type,
                }
            )
            return Response(MaterialPurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def material_purchase_detail(request, pk):
    """Retrieve, update or delete a material purchase"""
    purchase = get_object_or_404(MaterialPurchase, pk=pk)

    if request.method == 'GET':
        return Response(MaterialPurchaseSerializer(purchase).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MaterialPurchaseSerializer(purchase, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request, action='update', model_name='MaterialPurchase',
                object_id=purchase.id, object_name=str(purchase), changes=dict(request.data)
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='MaterialPurchase',
            object_id=purchase.id, object_name=str(purchase)
        )
        purchase.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Transportation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transportation_list_create(request):
    """List transport expenses or record one"""
    if request.method == 'GET':
        queryset = TransportationExpense.objects.select_related('project', 'worker')
        project = request.query_params.get('project', None)
        if project:
            queryset = queryset.filter(project_id=project)
        date = request.query_params.get('date', None)
        if date:
            queryset = queryset.filter(date=date)
        serializer = TransportationExpenseSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = TransportationExpenseSerializer(data=request.data)
        if serializer.is_valid():
            expense = serializer.save(created_by=request.user)
            create_audit_log(
                request=request, action='create', model_name='TransportationExpense',
                object_id=expense.id, object_name=expense.description,
                changes={'project': expense.project_id, 'amount': expense.amount}
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def transportation_detail(request, pk):
    """Retrieve, update or delete a transport expense"""
    expense = get_object_or_404(TransportationExpense, pk=pk)

    if request.method == 'GET':
        return Response(TransportationExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = TransportationExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request, action='delete', model_name='TransportationExpense',
            object_id=expense.id, object_name=expense.description
        )
        expense.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
