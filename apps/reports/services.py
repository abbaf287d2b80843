"""
Financial reports built from payroll records
"""

import re
from collections import OrderedDict

from django.db.models import Count, Q, Sum

from apps.core.exceptions import ValidationException
from apps.core.utils import parse_iso_date, quantize_money
from apps.payroll.models import PayrollRecord

UNASSIGNED_DEPARTMENT = 'Unassigned'

FINANCIAL_YEAR_RE = re.compile(r'^(\d{4})-(\d{2})$')

MONEY_SUMS = {
    'total_net': Sum('net_salary'),
    'total_gross': Sum('gross_salary'),
    'total_pf': Sum('pf_amount'),
    'total_esic': Sum('esic_amount'),
    'total_tds': Sum('tds_amount'),
}


def _money(row):
    return {key: quantize_money(row[key]) if key in MONEY_SUMS else value for key, value in row.items()}


def _group(queryset, *fields):
    rows = queryset.order_by().values(*fields).annotate(count=Count('id'), **MONEY_SUMS)
    return [_money(row) for row in rows]


def parse_date_range(start, end):
    if not start or not end:
        raise ValidationException('start_date and end_date are required', code='MISSING_DATE_PARAMETERS')
    start_date, end_date = parse_iso_date(start), parse_iso_date(end)
    if start_date is None or end_date is None:
        raise ValidationException('Dates must be in YYYY-MM-DD format', code='INVALID_DATE_FORMAT')
    if start_date > end_date:
        raise ValidationException('start_date must not be after end_date', code='INVALID_DATE_RANGE')
    return start_date, end_date


def parse_financial_year(value):
    """``2024-25`` -> (2024, 2025). April of the first year to March of the next."""
    if not value:
        raise ValidationException('financial_year is required', code='MISSING_FINANCIAL_YEAR')
    match = FINANCIAL_YEAR_RE.match(value)
    if not match or int(match.group(2)) != (int(match.group(1)) + 1) % 100:
        raise ValidationException(
            'financial_year must look like 2024-25', code='INVALID_FINANCIAL_YEAR_FORMAT'
        )
    start_year = int(match.group(1))
    return start_year, start_year + 1


class SalaryReportService:

    @staticmethod
    def records_between(organization, start_date, end_date):
        """Payroll rows paid in the range, or created in it when still unpaid."""
        return PayrollRecord.objects.filter(organization=organization).filter(
            Q(payment_date__range=(start_date, end_date))
            | Q(payment_date__isnull=True, created_at__date__range=(start_date, end_date))
        )

    @classmethod
    def salary_report(cls, organization, start, end):
        start_date, end_date = parse_date_range(start, end)
        records = cls.records_between(organization, start_date, end_date)

        totals = _money(records.aggregate(**MONEY_SUMS))

        by_employee = [
            {
                'employee_id': row['employee_id'],
                'employee_name': row['employee__name'],
                'department': row['employee__department'] or UNASSIGNED_DEPARTMENT,
                'total_net': row['total_net'],
                'total_gross': row['total_gross'],
                'total_tds': row['total_tds'],
                'count': row['count'],
            }
            for row in _group(records, 'employee_id', 'employee__name', 'employee__department')
        ]
        by_employee.sort(key=lambda row: row['total_net'], reverse=True)

        # Blank and missing departments both land in the fallback bucket
        departments = OrderedDict()
        for row in _group(records, 'employee__department'):
            name = row['employee__department'] or UNASSIGNED_DEPARTMENT
            bucket = departments.setdefault(name, {'department': name, 'total_net': 0, 'count': 0})
            bucket['total_net'] = quantize_money(bucket['total_net'] + row['total_net'])
            bucket['count'] += row['count']
        by_department = sorted(departments.values(), key=lambda row: row['total_net'], reverse=True)

        by_month = [
            {'year': row['year'], 'month': row['month'], 'total_net': row['total_net'], 'count': row['count']}
            for row in _group(records, 'year', 'month')
        ]
        by_month.sort(key=lambda row: (row['year'], row['month']))

        return {
            'start_date': start_date,
            'end_date': end_date,
            'record_count': records.count(),
            'total_salaries_paid': totals['total_net'],
            'total_gross': totals['total_gross'],
            'total_pf': totals['total_pf'],
            'total_esic': totals['total_esic'],
            'total_tds': totals['total_tds'],
            'total_deductions': quantize_money(
                totals['total_pf'] + totals['total_esic'] + totals['total_tds']
            ),
            'by_employee': by_employee,
            'by_department': by_department,
            'by_month': by_month,
        }


class TaxReportService:

    @staticmethod
    def records_for_financial_year(organization, start_year, end_year):
        return PayrollRecord.objects.filter(organization=organization).filter(
            Q(year=start_year, month__gte=4) | Q(year=end_year, month__lte=3)
        )

    @classmethod
    def tax_report(cls, organization, financial_year):
        start_year, end_year = parse_financial_year(financial_year)
        records = cls.records_for_financial_year(organization, start_year, end_year)
        totals = _money(records.aggregate(**MONEY_SUMS))

        by_employee = [
            {
                'employee_id': row['employee_id'],
                'employee_name': row['employee__name'],
                'total_gross': row['total_gross'],
                'total_tds': row['total_tds'],
                'months': row['count'],
            }
            for row in _group(records, 'employee_id', 'employee__name')
        ]
        by_employee.sort(key=lambda row: row['total_tds'], reverse=True)

        return {
            'financial_year': financial_year,
            'start_year': start_year,
            'end_year': end_year,
            'total_gross': totals['total_gross'],
            'total_tds_deducted': totals['total_tds'],
            'by_employee': by_employee,
        }
