import django_filters
from django.db.models import Q
from .models import Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense


class WorkerFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    type = django_filters.CharFilter(field_name='type', lookup_expr='iexact')
    is_active = django_filters.BooleanFilter(field_name='is_active')

    class Meta:
        model = Worker
        fields = ['search', 'type', 'is_active']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(phone__icontains=value) | Q(type__icontains=value)
        )


class WorkerAttendanceFilter(django_filters.FilterSet):
    """Attendance filtering used by the list endpoint and the reports"""
    project = django_filters.NumberFilter(field_name='project_id')
    worker = django_filters.NumberFilter(field_name='worker_id')
    date = django_filters.DateFilter(field_name='date')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    is_present = django_filters.BooleanFilter(field_name='is_present')
    payment_type = django_filters.ChoiceFilter(choices=WorkerAttendance.PAYMENT_TYPE_CHOICES)
    unpaid = django_filters.BooleanFilter(method='filter_unpaid')

    class Meta:
        model = WorkerAttendance
        fields = ['project', 'worker', 'date', 'date_from', 'date_to', 'is_present', 'payment_type']

    def filter_unpaid(self, queryset, name, value):
        if value:
            return queryset.filter(remaining_amount__gt=0)
        return queryset


class WorkerTransferFilter(django_filters.FilterSet):
    worker = django_filters.NumberFilter(field_name='worker_id')
    project = django_filters.NumberFilter(field_name='project_id')
    date = django_filters.DateFilter(field_name='transfer_date')

    class Meta:
        model = WorkerTransfer
        fields = ['worker', 'project', 'date']


class WorkerMiscExpenseFilter(django_filters.FilterSet):
    project = django_filters.NumberFilter(field_name='project_id')
    date = django_filters.DateFilter(field_name='date')

    class Meta:
        model = WorkerMiscExpense
        fields = ['project', 'date']
