"""
Excel exports built with openpyxl.

A sheet is laid out as: company header (from the active ReportTemplate),
report title, optional subtitle lines, a styled header row, the data rows,
an optional totals row and the template footer.
"""
import io
from collections import namedtuple
from datetime import date as date_type

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
MONEY_FORMAT = '#,##0.00'

Column = namedtuple('Column', ['key', 'header', 'width', 'kind'])


def col(key, header, width=15, kind='text'):
    """kind: text, money, number or date"""
    return Column(key, header, width, kind)


def _styles(template):
    primary = template.primary_color if template else '4472C4'
    secondary = template.secondary_color if template else 'D6E4F0'
    font_name = template.font_family if template else 'Arial'
    size = template.font_size if template else 11
    thin = Side(style='thin', color='999999')
    return {
        'border': Border(left=thin, right=thin, top=thin, bottom=thin),
        'header_fill': PatternFill(start_color=primary, end_color=primary, fill_type='solid'),
        'header_font': Font(name=font_name, color='FFFFFF', bold=True, size=size),
        'total_fill': PatternFill(start_color=secondary, end_color=secondary, fill_type='solid'),
        'title_font': Font(name=font_name, bold=True, size=size + 5),
        'company_font': Font(name=font_name, bold=True, size=size + 2, color=primary),
        'body_font': Font(name=font_name, size=size),
        'bold_font': Font(name=font_name, bold=True, size=size),
        'muted_font': Font(name=font_name, italic=True, size=max(size - 2, 8), color='666666'),
    }


def _value(row, key):
    return row.get(key) if isinstance(row, dict) else getattr(row, key, None)


def write_sheet(ws, title, columns, rows, template=None, totals=None, subtitle_lines=None):
    """Fill ``ws`` with a report table; ``totals`` maps column keys to totals row values"""
    styles = _styles(template)
    last_col = get_column_letter(len(columns))
    ws.sheet_view.rightToLeft = True
    row_idx = 1

    if template is None or template.show_header:
        company = template.company_name if template else ''
        if company:
            ws.merge_cells(f'A{row_idx}:{last_col}{row_idx}')
            cell = ws.cell(row=row_idx, column=1, value=company)
            cell.font = styles['company_font']
            cell.alignment = Alignment(horizontal='center')
            row_idx += 1
        if template and template.header_title:
            ws.merge_cells(f'A{row_idx}:{last_col}{row_idx}')
            cell = ws.cell(row=row_idx, column=1, value=template.header_title)
            cell.font = styles['bold_font']
            cell.alignment = Alignment(horizontal='center')
            row_idx += 1

    ws.merge_cells(f'A{row_idx}:{last_col}{row_idx}')
    cell = ws.cell(row=row_idx, column=1, value=title)
    cell.font = styles['title_font']
    cell.alignment = Alignment(horizontal='center')
    row_idx += 1

    lines = list(subtitle_lines or [])
    if template is None or template.show_date:
        lines.append(f'تاريخ الإنشاء: {timezone.localtime().strftime("%Y-%m-%d %H:%M")}')
    for line in lines:
        ws.merge_cells(f'A{row_idx}:{last_col}{row_idx}')
        cell = ws.cell(row=row_idx, column=1, value=line)
        cell.font = styles['body_font']
        cell.alignment = Alignment(horizontal='center')
        row_idx += 1
    row_idx += 1

    for c, column in enumerate(columns, 1):
        cell = ws.cell(row=row_idx, column=c, value=column.header)
        cell.fill = styles['header_fill']
        cell.font = styles['header_font']
        cell.border = styles['border']
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        ws.column_dimensions[get_column_letter(c)].width = column.width
    header_row = row_idx
    row_idx += 1

    for row in rows:
        for c, column in enumerate(columns, 1):
            cell = ws.cell(row=row_idx, column=c, value=_value(row, column.key))
            cell.border = styles['border']
            cell.font = styles['body_font']
            if column.kind == 'money':
                cell.number_format = MONEY_FORMAT
            elif column.kind == 'number':
                cell.number_format = '#,##0.##'
            elif column.kind == 'date' and isinstance(cell.value, date_type):
                cell.number_format = 'yyyy-mm-dd'
                cell.alignment = Alignment(horizontal='center')
        row_idx += 1

    if totals:
        for c, column in enumerate(columns, 1):
            value = totals.get(column.key, 'الإجمالي' if c == 1 else None)
            cell = ws.cell(row=row_idx, column=c, value=value)
            cell.fill = styles['total_fill']
            cell.font = styles['bold_font']
            cell.border = styles['border']
            if column.kind == 'money':
                cell.number_format = MONEY_FORMAT
        row_idx += 1

    if template is not None and template.show_footer:
        row_idx += 1
        for text in (template.footer_text, template.footer_contact):
            if not text:
                continue
            ws.merge_cells(f'A{row_idx}:{last_col}{row_idx}')
            cell = ws.cell(row=row_idx, column=1, value=text)
            cell.font = styles['muted_font']
            cell.alignment = Alignment(horizontal='center')
            row_idx += 1

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
    if template is not None and template.page_orientation == 'landscape':
        ws.page_setup.orientation = 'landscape'
    return ws


def build_workbook(sheets, template=None):
    """
    sheets: iterable of dicts with title, columns, rows and optionally
    sheet_name, totals and subtitle_lines.
    """
    wb = Workbook()
    wb.remove(wb.active)
    for sheet in sheets:
        # Excel sheet names: max 31 chars
        ws = wb.create_sheet(title=(sheet.get('sheet_name') or sheet['title'])[:31])
        write_sheet(
            ws, sheet['title'], sheet['columns'], sheet['rows'], template=template,
            totals=sheet.get('totals'), subtitle_lines=sheet.get('subtitle_lines'),
        )
    return wb


def workbook_response(wb, filename):
    buffer = io.BytesIO()
    wb.save(buffer)
    response = HttpResponse(buffer.getvalue(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    buffer.close()
    return response
