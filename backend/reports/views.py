import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from decimal import Decimal

from backend.core.utils import money, parse_date, parse_id_list
from backend.projects.models import Project
from backend.projects.serializers import (
    FundTransferSerializer, ProjectFundTransferSerializer, DailyExpenseSummarySerializer
)
from backend.workers.models import Worker
from backend.workers.serializers import (
    WorkerAttendanceSerializer, WorkerTransferSerializer, WorkerMiscExpenseSerializer
)
from backend.workers.services import attendance_for, transfers_for, summarize
from backend.purchasing.serializers import MaterialPurchaseSerializer, TransportationExpenseSerializer
from backend.parties.models import Supplier
from backend.parties.services import get_supplier_statement
from .exporters import build_workbook, workbook_response, col
from .models import ReportTemplate
from .serializers import ReportTemplateSerializer
from . import services

logger = logging.getLogger('backend.reports')


def wants_xlsx(request, export=False):
    return export or request.query_params.get('format', '').lower() == 'xlsx'


def stringify(values):
    return {key: money(value) if isinstance(value, Decimal) else value for key, value in values.items()}


def required_params(request, *names):
    """Returns (values, error response)"""
    values = {name: request.query_params.get(name, None) for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        return None, Response(
            {'error': f"Missing required parameters: {', '.join(missing)}"},
            status=status.HTTP_400_BAD_REQUEST
        )
    return values, None


def invalid_date(name):
    return Response({'error': f'Invalid date for {name}, expected YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)


def serialize_day(report):
    return {
        'date': report['date'].isoformat(),
        'summary': DailyExpenseSummarySerializer(report['summary']).data,
        'fund_transfers': FundTransferSerializer(report['fund_transfers'], many=True).data,
        'incoming_transfers': ProjectFundTransferSerializer(report['incoming_transfers'], many=True).data,
        'outgoing_transfers': ProjectFundTransferSerializer(report['outgoing_transfers'], many=True).data,
        'attendance': WorkerAttendanceSerializer(report['attendance'], many=True).data,
        'material_purchases': MaterialPurchaseSerializer(report['material_purchases'], many=True).data,
        'transportation': TransportationExpenseSerializer(report['transportation'], many=True).data,
        'worker_transfers': WorkerTransferSerializer(report['worker_transfers'], many=True).data,
        'misc_expenses': WorkerMiscExpenseSerializer(report['misc_expenses'], many=True).data,
    }


DAY_COLUMNS = [
    col('date', 'التاريخ', 12, 'date'),
    col('category', 'البند', 18),
    col('description', 'البيان', 40),
    col('income', 'وارد', 14, 'money'),
    col('expense', 'منصرف', 14, 'money'),
]


def day_rows(report):
    """Flatten one day into ledger-like rows for the xlsx export"""
    date = report['date']
    rows = []
    for t in report['fund_transfers']:
        rows.append({'date': date, 'category': 'تحويل عهدة', 'description': t.sender_name, 'income': t.amount})
    for t in report['incoming_transfers']:
        rows.append({'date': date, 'category': 'ترحيل وارد', 'description': t.from_project.name, 'income': t.amount})
    for t in report['outgoing_transfers']:
        rows.append({'date': date, 'category': 'ترحيل صادر', 'description': t.to_project.name, 'expense': t.amount})
    for a in report['attendance']:
        if a.paid_amount > 0:
            rows.append({'date': date, 'category': 'أجور العمال', 'description': a.worker.name, 'expense': a.paid_amount})
    for p in report['material_purchases']:
        if p.purchase_type == 'cash':
            rows.append({'date': date, 'category': 'مشتريات المواد', 'description': p.material.name, 'expense': p.total_amount})
    for t in report['transportation']:
        rows.append({'date': date, 'category': 'نقل ومواصلات', 'description': t.description, 'expense': t.amount})
    for t in report['worker_transfers']:
        rows.append({'date': date, 'category': 'حوالات العمال', 'description': t.worker.name, 'expense': t.amount})
    for m in report['misc_expenses']:
        rows.append({'date': date, 'category': 'نثريات', 'description': m.description, 'expense': m.amount})
    return rows


def day_sheet(project, report):
    summary = report['summary']
    return {
        'title': f'كشف المصروفات اليومية - {project.name}',
        'sheet_name': report['date'].isoformat(),
        'subtitle_lines': [
            f"التاريخ: {report['date'].isoformat()}",
            f'الرصيد المرحل: {summary.carried_forward_amount:,.2f}',
            f'المتبقي: {summary.remaining_balance:,.2f}',
        ],
        'columns': DAY_COLUMNS,
        'rows': day_rows(report),
        'totals': {
            'income': summary.total_fund_transfers + summary.total_incoming_project_transfers,
            'expense': summary.total_expenses + summary.total_outgoing_project_transfers,
        },
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_expenses(request, export=False):
    """Daily summary of a project with every record of that day"""
    params, error = required_params(request, 'project', 'date')
    if error:
        return error
    project = get_object_or_404(Project, pk=params['project'])
    date = parse_date(params['date'])
    if date is None:
        return invalid_date('date')

    logger.info(f"User {request.user.username} requested daily expenses (project={project.id}, date={date})")
    report = services.daily_report(project, date)

    if wants_xlsx(request, export):
        wb = build_workbook([day_sheet(project, report)], template=ReportTemplate.get_active())
        return workbook_response(wb, f'daily-expenses-{project.id}-{date.isoformat()}.xlsx')

    return Response({'project': {'id': project.id, 'name': project.name}, **serialize_day(report)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_expenses_range(request, export=False):
    """Daily reports for every active day of a period"""
    params, error = required_params(request, 'project', 'date_from', 'date_to')
    if error:
        return error
    project = get_object_or_404(Project, pk=params['project'])
    date_from = parse_date(params['date_from'])
    date_to = parse_date(params['date_to'])
    if date_from is None:
        return invalid_date('date_from')
    if date_to is None:
        return invalid_date('date_to')
    if date_from > date_to:
        return Response({'error': 'date_from must be before date_to'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        reports = services.daily_range_report(project, date_from, date_to)
    except Exception as e:
        logger.error(f"Error in daily_expenses_range: {str(e)}", exc_info=True)
        return Response(
            {'error': 'An error occurred while generating the daily expenses report'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if wants_xlsx(request, export):
        sheets = [day_sheet(project, report) for report in reports]
        if not sheets:
            sheets = [{'title': f'كشف المصروفات اليومية - {project.name}', 'columns': DAY_COLUMNS, 'rows': []}]
        wb = build_workbook(sheets, template=ReportTemplate.get_active())
        return workbook_response(wb, f'daily-expenses-{project.id}-{date_from}-{date_to}.xlsx')

    return Response({
        'project': {'id': project.id, 'name': project.name},
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'days': [serialize_day(report) for report in reports],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def material_purchases(request, export=False):
    """Material purchases of a period with totals per purchase type"""
    project_id = request.query_params.get('project', None)
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))
    report = services.material_purchases_report(project_id, date_from, date_to)

    if wants_xlsx(request, export):
        rows = [{
            'purchase_date': p.purchase_date,
            'project': p.project.name,
            'material': p.material.name,
            'quantity': p.quantity,
            'unit': p.material.unit,
            'unit_price': p.unit_price,
            'total_amount': p.total_amount,
            'purchase_type': p.get_purchase_type_display(),
            'supplier': p.supplier_name,
            'invoice_number': p.invoice_number,
        } for p in report['purchases']]
        wb = build_workbook([{
            'title': 'تقرير مشتريات المواد',
            'columns': [
                col('purchase_date', 'التاريخ', 12, 'date'),
                col('project', 'المشروع', 20),
                col('material', 'المادة', 22),
                col('quantity', 'الكمية', 10, 'number'),
                col('unit', 'الوحدة', 10),
                col('unit_price', 'سعر الوحدة', 12, 'money'),
                col('total_amount', 'الإجمالي', 14, 'money'),
                col('purchase_type', 'نوع الشراء', 10),
                col('supplier', 'المورد', 20),
                col('invoice_number', 'رقم الفاتورة', 14),
            ],
            'rows': rows,
            'totals': {'total_amount': report['totals']['total']},
        }], template=ReportTemplate.get_active())
        return workbook_response(wb, 'material-purchases.xlsx')

    return Response({
        'purchases': MaterialPurchaseSerializer(report['purchases'], many=True).data,
        'totals': stringify(report['totals']),
        'count': len(report['purchases']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_summary(request):
    """Income, expense categories and net balance of a project"""
    params, error = required_params(request, 'project')
    if error:
        return error
    project = get_object_or_404(Project, pk=params['project'])
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    report = services.project_summary_report(project, date_from, date_to)
    return Response({
        'project': {'id': project.id, 'name': project.name, 'status': project.status},
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'income': stringify(report['income']),
        'expenses': stringify(report['expenses']),
        'deferred': stringify(report['deferred']),
        'counts': report['counts'],
        'total_income': money(report['total_income']),
        'total_expenses': money(report['total_expenses']),
        'net_balance': money(report['net_balance']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def advanced_report(request, export=False):
    """Categorised expenses or income of a project (report_type=expenses|income)"""
    params, error = required_params(request, 'project', 'report_type', 'date_from', 'date_to')
    if error:
        return error
    if params['report_type'] not in ('expenses', 'income'):
        return Response({'error': 'report_type must be expenses or income'}, status=status.HTTP_400_BAD_REQUEST)
    project = get_object_or_404(Project, pk=params['project'])
    date_from = parse_date(params['date_from'])
    date_to = parse_date(params['date_to'])
    if date_from is None:
        return invalid_date('date_from')
    if date_to is None:
        return invalid_date('date_to')

    report = services.advanced_report(project, params['report_type'], date_from, date_to)
    is_expenses = params['report_type'] == 'expenses'
    total_key = 'totalExpenses' if is_expenses else 'totalIncome'

    if wants_xlsx(request, export):
        wb = build_workbook([{
            'title': f"{'تقرير المصروفات' if is_expenses else 'تقرير الإيرادات'} - {project.name}",
            'subtitle_lines': [f'الفترة: {date_from.isoformat()} - {date_to.isoformat()}'],
            'columns': [
                col('date', 'التاريخ', 12, 'date'),
                col('category', 'الفئة', 16),
                col('subcategory', 'الفئة الفرعية', 16),
                col('description', 'البيان', 36),
                col('amount', 'المبلغ', 14, 'money'),
            ],
            'rows': report['rows'],
            'totals': {'amount': report[total_key]},
        }], template=ReportTemplate.get_active())
        return workbook_response(wb, f"{params['report_type']}-{project.id}.xlsx")

    data = {
        'project': {'id': project.id, 'name': project.name},
        'report_type': params['report_type'],
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'rows': [{**row, 'date': row['date'].isoformat(), 'amount': money(row['amount'])} for row in report['rows']],
        total_key: money(report[total_key]),
    }
    if is_expenses:
        data['categoryTotals'] = stringify(report['categoryTotals'])
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def workers_settlement(request, export=False):
    """
    Settlement of workers across projects.

    project_ids: 'all' or a comma separated list (required)
    worker_ids: optional comma separated list
    """
    raw_projects = request.query_params.get('project_ids', None)
    if not raw_projects:
        return Response({'error': 'project_ids is required'}, status=status.HTTP_400_BAD_REQUEST)
    if raw_projects == 'all':
        projects = list(Project.objects.all().order_by('name'))
    else:
        projects = list(Project.objects.filter(id__in=parse_id_list(raw_projects)).order_by('name'))
    if not projects:
        return Response({'error': 'No matching projects found'}, status=status.HTTP_404_NOT_FOUND)

    worker_ids = parse_id_list(request.query_params.get('worker_ids', None))
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    report = services.workers_settlement(projects, worker_ids, date_from, date_to)

    if wants_xlsx(request, export):
        wb = build_workbook([{
            'title': 'تصفية حساب العمال',
            'subtitle_lines': ['المشاريع: ' + '، '.join(p.name for p in projects)],
            'columns': [
                col('worker_name', 'اسم العامل', 24),
                col('worker_type', 'المهنة', 14),
                col('daily_wage', 'الأجر اليومي', 12, 'money'),
                col('total_work_days', 'أيام العمل', 10, 'number'),
                col('total_earned', 'المستحق', 14, 'money'),
                col('total_paid', 'المدفوع', 14, 'money'),
                col('total_transfers', 'الحوالات', 14, 'money'),
                col('final_balance', 'الرصيد النهائي', 14, 'money'),
            ],
            'rows': report['workers'],
            'totals': {k: v for k, v in report['totals'].items() if k != 'workers_count'},
        }], template=ReportTemplate.get_active())
        return workbook_response(wb, 'workers-settlement.xlsx')

    return Response({
        'projects': report['projects'],
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'workers': [stringify(row) for row in report['workers']],
        'totals': stringify(report['totals']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unified_transactions(request):
    """Income, expenses and deferred purchases in one list"""
    tx_type = request.query_params.get('type', None)
    if tx_type and tx_type not in ('income', 'expense', 'deferred'):
        return Response({'error': 'type must be income, expense or deferred'}, status=status.HTTP_400_BAD_REQUEST)
    report = services.unified_transactions(
        project_id=request.query_params.get('project', None),
        type=tx_type,
        category=request.query_params.get('category', None),
        search=request.query_params.get('search', None),
        date_from=parse_date(request.query_params.get('date_from', None)),
        date_to=parse_date(request.query_params.get('date_to', None)),
    )
    return Response({
        'transactions': [
            {**row, 'date': row['date'].isoformat(), 'created_at': row['created_at'].isoformat(),
             'amount': money(row['amount'])}
            for row in report['transactions']
        ],
        'totals': stringify(report['totals']),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_statement_export(request, worker_id):
    """Worker account statement as xlsx"""
    worker = get_object_or_404(Worker, pk=worker_id)
    project_ids = parse_id_list(request.query_params.get('project', None))
    date_from = parse_date(request.query_params.get('date_from', None))
    date_to = parse_date(request.query_params.get('date_to', None))

    attendance = attendance_for(worker.id, project_ids, date_from, date_to)
    transfers = transfers_for(worker.id, project_ids, date_from, date_to)
    summary = summarize(attendance, transfers)

    attendance_rows = [{
        'date': a.date,
        'project': a.project.name,
        'work_days': a.work_days,
        'daily_wage': a.daily_wage,
        'actual_wage': a.actual_wage,
        'paid_amount': a.paid_amount,
        'remaining_amount': a.remaining_amount,
        'work_description': a.work_description,
    } for a in attendance]
    transfer_rows = [{
        'transfer_date': t.transfer_date,
        'project': t.project.name,
        'recipient_name': t.recipient_name,
        'transfer_method': t.get_transfer_method_display(),
        'transfer_number': t.transfer_number,
        'amount': t.amount,
    } for t in transfers]

    subtitle = [
        f'العامل: {worker.name} ({worker.type})',
        f"الرصيد المتبقي: {summary['remaining_balance']:,.2f}",
    ]
    wb = build_workbook([
        {
            'title': 'كشف حساب عامل',
            'sheet_name': 'الحضور',
            'subtitle_lines': subtitle,
            'columns': [
                col('date', 'التاريخ', 12, 'date'),
                col('project', 'المشروع', 20),
                col('work_days', 'أيام العمل', 10, 'number'),
                col('daily_wage', 'الأجر اليومي', 12, 'money'),
                col('actual_wage', 'المستحق', 12, 'money'),
                col('paid_amount', 'المدفوع', 12, 'money'),
                col('remaining_amount', 'المتبقي', 12, 'money'),
                col('work_description', 'وصف العمل', 30),
            ],
            'rows': attendance_rows,
            'totals': {
                'work_days': summary['total_work_days'],
                'actual_wage': summary['total_wages_earned'],
                'paid_amount': summary['total_paid'],
            },
        },
        {
            'title': 'حوالات العامل',
            'sheet_name': 'الحوالات',
            'subtitle_lines': [f'العامل: {worker.name}'],
            'columns': [
                col('transfer_date', 'التاريخ', 12, 'date'),
                col('project', 'المشروع', 20),
                col('recipient_name', 'المستلم', 20),
                col('transfer_method', 'طريقة التحويل', 14),
                col('transfer_number', 'رقم الحوالة', 14),
                col('amount', 'المبلغ', 12, 'money'),
            ],
            'rows': transfer_rows,
            'totals': {'amount': summary['total_transfers']},
        },
    ], template=ReportTemplate.get_active())
    return workbook_response(wb, f'worker-statement-{worker.id}.xlsx')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_statement_export(request, supplier_id):
    """Supplier account statement (running ledger) as xlsx"""
    supplier = get_object_or_404(Supplier, pk=supplier_id)
    statement = get_supplier_statement(
        supplier,
        project_id=request.query_params.get('project', None),
        date_from=parse_date(request.query_params.get('date_from', None)),
        date_to=parse_date(request.query_params.get('date_to', None)),
    )
    totals = statement['totals']
    wb = build_workbook([{
        'title': f'كشف حساب المورد - {supplier.name}',
        'subtitle_lines': [
            f"إجمالي الآجل: {totals['totalDebt']:,.2f}",
            f"المدفوع: {totals['totalPaid']:,.2f}",
            f"المتبقي: {totals['remainingDebt']:,.2f}",
        ],
        'columns': [
            col('date', 'التاريخ', 12, 'date'),
            col('description', 'البيان', 32),
            col('project', 'المشروع', 18),
            col('invoice_number', 'المرجع', 14),
            col('debit', 'مدين', 14, 'money'),
            col('credit', 'دائن', 14, 'money'),
            col('running_balance', 'الرصيد', 14, 'money'),
        ],
        'rows': statement['ledger'],
        'totals': {
            'debit': totals['totalDebt'],
            'credit': totals['totalPaid'],
            'running_balance': totals['remainingDebt'],
        },
    }], template=ReportTemplate.get_active())
    return workbook_response(wb, f'supplier-statement-{supplier.id}.xlsx')


# Report template views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def report_template_list_create(request):
    if request.method == 'GET':
        serializer = ReportTemplateSerializer(ReportTemplate.objects.all(), many=True)
        return Response(serializer.data)
    serializer = ReportTemplateSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_template_active(request):
    """Active template; the default one is created on first use"""
    return Response(ReportTemplateSerializer(ReportTemplate.get_active()).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def report_template_detail(request, pk):
    template = get_object_or_404(ReportTemplate, pk=pk)

    if request.method == 'GET':
        return Response(ReportTemplateSerializer(template).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ReportTemplateSerializer(template, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        template.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
