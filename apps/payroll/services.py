"""
Payroll Services - monthly aggregation from attendance
"""

import calendar
import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum

from apps.attendance.models import AttendanceRecord
from apps.core.exceptions import ConflictException, ResourceNotFoundException, ValidationException
from apps.core.utils import local_today, quantize_money
from apps.employees.models import Employee

from .models import PayrollRecord, SalaryComponent

logger = logging.getLogger(__name__)

DEDUCTION_MODE_FLAT = 'flat'
DEDUCTION_MODE_STATUTORY = 'statutory'

PF_RATE = Decimal('0.12')
ESIC_RATE = Decimal('0.0075')
ESIC_GROSS_CEILING = Decimal('21000')
TDS_STANDARD_DEDUCTION = Decimal('50000')

# (upper bound of taxable income, rate); the last slab is open-ended
TDS_SLABS = [
    (Decimal('300000'), Decimal('0')),
    (Decimal('600000'), Decimal('0.05')),
    (Decimal('900000'), Decimal('0.10')),
    (Decimal('1200000'), Decimal('0.15')),
    (Decimal('1500000'), Decimal('0.20')),
    (None, Decimal('0.30')),
]


def deduction_rate():
    return Decimal(str(getattr(settings, 'PAYROLL_DEDUCTION_RATE', '0.15')))


def deduction_mode():
    return getattr(settings, 'PAYROLL_DEDUCTION_MODE', DEDUCTION_MODE_FLAT)


def calculate_monthly_tds(annual_income) -> Decimal:
    """Monthly TDS from the annual slab table after the standard deduction."""
    taxable = max(Decimal('0'), Decimal(str(annual_income)) - TDS_STANDARD_DEDUCTION)
    tax = Decimal('0')
    lower = Decimal('0')
    for upper, rate in TDS_SLABS:
        if taxable <= lower:
            break
        band_top = taxable if upper is None else min(taxable, upper)
        tax += (band_top - lower) * rate
        if upper is None:
            break
        lower = upper
    return quantize_money(tax / 12)


def statutory_amounts(basic, gross):
    """PF on basic, ESIC below the gross ceiling, TDS on annualised gross."""
    basic = Decimal(str(basic))
    gross = Decimal(str(gross))
    pf = quantize_money(basic * PF_RATE)
    esic = quantize_money(gross * ESIC_RATE) if gross < ESIC_GROSS_CEILING else Decimal('0.00')
    tds = calculate_monthly_tds(gross * 12)
    return {'pf_amount': pf, 'esic_amount': esic, 'tds_amount': tds}


def compute_gross_pay(employee, present_days, total_minutes, days_in_month) -> Decimal:
    """
    Salaried: salary / days_in_month x present_days.
    Hourly: hourly_rate x hours worked.
    Salary wins when both are set; neither gives 0.
    """
    if employee.is_salaried:
        daily = Decimal(str(employee.salary)) / Decimal(days_in_month)
        return quantize_money(daily * present_days)
    if employee.hourly_rate is not None:
        hours = Decimal(total_minutes) / Decimal(60)
        return quantize_money(Decimal(str(employee.hourly_rate)) * hours)
    return Decimal('0.00')


class PayrollAggregationService:
    """Builds PayrollRecord rows from a month of attendance."""

    @staticmethod
    def validate_period(month, year):
        if month in (None, '') or year in (None, ''):
            raise ValidationException('Month and year are required', code='MISSING_FIELDS')
        try:
            month = int(month)
        except (TypeError, ValueError):
            month = 0
        if not 1 <= month <= 12:
            raise ValidationException('Month must be between 1 and 12', code='INVALID_MONTH', field='month')
        try:
            year = int(year)
        except (TypeError, ValueError):
            year = 0
        if not 2000 <= year <= 2100:
            raise ValidationException('Year must be between 2000 and 2100', code='INVALID_YEAR', field='year')
        return month, year

    @staticmethod
    def aggregate_attendance(employee, month, year):
        totals = AttendanceRecord.objects.filter(
            employee=employee,
            date__year=year,
            date__month=month,
        ).aggregate(
            present_days=Count(
                'id',
                filter=Q(status__in=[AttendanceRecord.STATUS_PRESENT, AttendanceRecord.STATUS_LATE]),
            ),
            leave_days=Count('id', filter=Q(status=AttendanceRecord.STATUS_LEAVE)),
            total_minutes=Sum('duration'),
        )
        return {
            'present_days': totals['present_days'] or 0,
            'leave_days': totals['leave_days'] or 0,
            'total_minutes': totals['total_minutes'] or 0,
        }

    @staticmethod
    def component_totals(employee, basic):
        """Sum of the employee's active allowances and deductions against ``basic``."""
        allowances = Decimal('0.00')
        deductions = Decimal('0.00')
        for component in SalaryComponent.objects.filter(employee=employee, is_active=True):
            value = component.value_for(basic)
            if component.component_type == SalaryComponent.TYPE_ALLOWANCE:
                allowances += value
            else:
                deductions += value
        return quantize_money(allowances), quantize_money(deductions)

    @classmethod
    def calculate(cls, employee, month, year):
        """Field values for one employee's PayrollRecord. Nothing is written."""
        days_in_month = calendar.monthrange(year, month)[1]
        attendance = cls.aggregate_attendance(employee, month, year)

        basic = compute_gross_pay(
            employee, attendance['present_days'], attendance['total_minutes'], days_in_month
        )
        # Nothing worked, nothing paid: components need earned basic pay
        if basic > 0:
            allowances, component_deductions = cls.component_totals(employee, basic)
        else:
            allowances, component_deductions = Decimal('0.00'), Decimal('0.00')
        gross = quantize_money(basic + allowances)
        statutory = statutory_amounts(basic, gross)

        if deduction_mode() == DEDUCTION_MODE_STATUTORY:
            deductions = statutory['pf_amount'] + statutory['esic_amount'] + statutory['tds_amount']
        else:
            deductions = gross * deduction_rate()
        deductions = quantize_money(deductions + component_deductions)

        return {
            **attendance,
            'basic_salary': basic,
            'allowances': allowances,
            'gross_salary': gross,
            'deductions': deductions,
            'net_salary': quantize_money(gross - deductions),
            **statutory,
        }

    @classmethod
    def _create_record(cls, organization, employee, month, year, created_by=None):
        values = cls.calculate(employee, month, year)
        return PayrollRecord.objects.create(
            organization=organization,
            employee=employee,
            month=month,
            year=year,
            status=PayrollRecord.STATUS_DRAFT,
            created_by=created_by,
            **values,
        )

    @staticmethod
    def _exists(employee, month, year):
        return PayrollRecord.objects.filter(employee=employee, month=month, year=year).exists()

    @classmethod
    def generate_for_employee(cls, organization, employee_id, month, year, created_by=None):
        month, year = cls.validate_period(month, year)
        employee = Employee.objects.filter(organization=organization, id=employee_id).first()
        if employee is None:
            raise ResourceNotFoundException('Employee', employee_id, code='EMPLOYEE_NOT_FOUND')

        if cls._exists(employee, month, year):
            raise ConflictException(
                f"Payroll already exists for {employee.name} for {month}/{year}",
                code='PAYROLL_ALREADY_EXISTS',
            )
        try:
            with transaction.atomic():
                record = cls._create_record(organization, employee, month, year, created_by)
        except IntegrityError:
            raise ConflictException(
                f"Payroll already exists for {employee.name} for {month}/{year}",
                code='PAYROLL_ALREADY_EXISTS',
            )
        logger.info("Payroll generated employee=%s period=%s/%s", employee.id, month, year)
        return record

    @classmethod
    def generate(cls, organization, month, year, created_by=None):
        """
        Bulk generation for every active employee. Employees that already
        have a record for the period are skipped and reported.
        """
        month, year = cls.validate_period(month, year)
        employees = Employee.objects.filter(organization=organization, status=Employee.STATUS_ACTIVE)
        if not employees.exists():
            raise ValidationException('No active employees found', code='NO_EMPLOYEES')

        created, skipped = [], []
        for employee in employees:
            if cls._exists(employee, month, year):
                skipped.append(employee)
                continue
            try:
                with transaction.atomic():
                    created.append(cls._create_record(organization, employee, month, year, created_by))
            except IntegrityError:
                # Raced with another generator
                skipped.append(employee)

        logger.info(
            "Payroll generated org=%s period=%s/%s created=%s skipped=%s",
            organization.id, month, year, len(created), len(skipped),
        )
        return {'month': month, 'year': year, 'created': created, 'skipped': skipped}

    @staticmethod
    def mark_paid(record, payment_date=None, user=None):
        if record.status == PayrollRecord.STATUS_PAID:
            raise ConflictException('Payroll record is already paid', code='ALREADY_PAID')
        record.status = PayrollRecord.STATUS_PAID
        record.payment_date = payment_date or local_today(record.organization)
        record.updated_by = user
        record.save(update_fields=['status', 'payment_date', 'updated_by', 'updated_at'])
        return record
