"""
Payroll aggregation, statutory amounts, generation endpoints and CSV export.
"""

import datetime
import io
from decimal import Decimal

import pandas as pd
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status

from apps.attendance.models import AttendanceRecord
from apps.payroll.models import PayrollRecord, SalaryComponent
from apps.payroll.services import (
    PayrollAggregationService,
    calculate_monthly_tds,
    statutory_amounts,
)
from apps.payroll.tasks import generate_monthly_payroll, previous_period

from .base import TenantAPITestCase
from .factories import AttendanceRecordFactory, EmployeeFactory, OrganizationFactory, SalaryComponentFactory

RECORDS_URL = '/api/v1/payroll/records/'
GENERATE_URL = RECORDS_URL + 'generate/'
COMPONENTS_URL = '/api/v1/payroll/salary-components/'


def worked_day(employee, day, minutes, status=AttendanceRecord.STATUS_PRESENT):
    record = AttendanceRecordFactory(employee=employee, organization=employee.organization, date=day, status=status)
    record.time_out = record.time_in + datetime.timedelta(minutes=minutes)
    record.duration = minutes
    record.save()
    return record


class StatutoryTests(SimpleTestCase):

    def test_no_tds_below_first_slab(self):
        self.assertEqual(calculate_monthly_tds(Decimal('300000')), Decimal('0.00'))

    def test_tds_across_slabs(self):
        # 1,000,000 - 50,000 = 950,000 taxable
        # 5% of 3L + 10% of 3L + 15% of 50k = 15,000 + 30,000 + 7,500
        self.assertEqual(calculate_monthly_tds(Decimal('1000000')), Decimal('4375.00'))

    def test_esic_only_below_ceiling(self):
        low = statutory_amounts(Decimal('20000'), Decimal('20000'))
        high = statutory_amounts(Decimal('30000'), Decimal('30000'))
        self.assertEqual(low['esic_amount'], Decimal('150.00'))
        self.assertEqual(high['esic_amount'], Decimal('0.00'))
        self.assertEqual(high['pf_amount'], Decimal('3600.00'))


class AggregationTests(TestCase):

    def setUp(self):
        self.org = OrganizationFactory()

    def test_zero_attendance_gives_zero_gross(self):
        salaried = EmployeeFactory(organization=self.org, salary=Decimal('31000'), hourly_rate=None)
        hourly = EmployeeFactory(organization=self.org, salary=None, hourly_rate=Decimal('250'))

        for employee in (salaried, hourly):
            values = PayrollAggregationService.calculate(employee, 5, 2024)
            self.assertEqual(values['gross_salary'], Decimal('0.00'))
            self.assertEqual(values['deductions'], Decimal('0.00'))
            self.assertEqual(values['net_salary'], Decimal('0.00'))
            self.assertEqual(values['present_days'], 0)

    def test_salaried_pay_is_prorated_by_present_days(self):
        employee = EmployeeFactory(organization=self.org, salary=Decimal('31000'))
        for day in range(1, 11):
            worked_day(employee, datetime.date(2024, 5, day), 480)
        worked_day(employee, datetime.date(2024, 5, 11), 300, status=AttendanceRecord.STATUS_LATE)
        AttendanceRecordFactory(employee=employee, organization=self.org, date=datetime.date(2024, 5, 12),
                                status=AttendanceRecord.STATUS_LEAVE)
        # Outside the period
        worked_day(employee, datetime.date(2024, 6, 1), 480)

        values = PayrollAggregationService.calculate(employee, 5, 2024)
        self.assertEqual(values['present_days'], 11)
        self.assertEqual(values['leave_days'], 1)
        self.assertEqual(values['total_minutes'], 10 * 480 + 300)
        # 31000 / 31 * 11
        self.assertEqual(values['gross_salary'], Decimal('11000.00'))
        self.assertEqual(values['deductions'], Decimal('1650.00'))
        self.assertEqual(values['net_salary'], Decimal('9350.00'))

    def test_hourly_pay_uses_worked_hours(self):
        employee = EmployeeFactory(organization=self.org, salary=None, hourly_rate=Decimal('200'))
        worked_day(employee, datetime.date(2024, 2, 1), 450)
        worked_day(employee, datetime.date(2024, 2, 2), 465)

        values = PayrollAggregationService.calculate(employee, 2, 2024)
        # 915 minutes = 15.25 hours
        self.assertEqual(values['gross_salary'], Decimal('3050.00'))

    def test_salary_wins_over_hourly_rate(self):
        employee = EmployeeFactory(organization=self.org, salary=Decimal('30000'), hourly_rate=Decimal('999'))
        worked_day(employee, datetime.date(2024, 4, 1), 60)
        self.assertEqual(PayrollAggregationService.calculate(employee, 4, 2024)['gross_salary'], Decimal('1000.00'))

    def test_no_compensation_gives_zero(self):
        employee = EmployeeFactory(organization=self.org, salary=None, hourly_rate=None)
        worked_day(employee, datetime.date(2024, 4, 1), 480)
        self.assertEqual(PayrollAggregationService.calculate(employee, 4, 2024)['gross_salary'], Decimal('0.00'))

    @override_settings(PAYROLL_DEDUCTION_RATE='0.10')
    def test_deduction_rate_is_configurable(self):
        employee = EmployeeFactory(organization=self.org, salary=Decimal('30000'))
        worked_day(employee, datetime.date(2024, 4, 1), 480)
        values = PayrollAggregationService.calculate(employee, 4, 2024)
        self.assertEqual(values['deductions'], Decimal('100.00'))

    @override_settings(PAYROLL_DEDUCTION_MODE='statutory')
    def test_statutory_mode_sums_pf_esic_tds(self):
        employee = EmployeeFactory(organization=self.org, salary=Decimal('30000'))
        worked_day(employee, datetime.date(2024, 4, 1), 480)
        values = PayrollAggregationService.calculate(employee, 4, 2024)
        # gross 1000: PF 120, ESIC 7.50, TDS 0
        self.assertEqual(values['deductions'], Decimal('127.50'))
        self.assertEqual(values['net_salary'], Decimal('872.50'))


class PayrollApiTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.employee = EmployeeFactory(organization=self.org, name='Anil', salary=Decimal('30000'))
        worked_day(self.employee, datetime.date(2024, 4, 1), 480)

    def test_generate_for_one_employee(self):
        response = self.client.post(
            GENERATE_URL, {'employee_id': str(self.employee.id), 'month': 4, 'year': 2024}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()['data']
        self.assertEqual(data['gross_salary'], '1000.00')
        self.assertEqual(data['status'], 'draft')

    def test_second_generation_conflicts(self):
        payload = {'employee_id': str(self.employee.id), 'month': 4, 'year': 2024}
        self.client.post(GENERATE_URL, payload, format='json')
        response = self.client.post(GENERATE_URL, payload, format='json')
        self.assertError(response, 409, 'PAYROLL_ALREADY_EXISTS')
        self.assertEqual(PayrollRecord.objects.count(), 1)

    def test_bulk_generation_skips_existing(self):
        other = EmployeeFactory(organization=self.org, salary=None, hourly_rate=Decimal('100'))
        EmployeeFactory(organization=self.org, status='inactive')
        PayrollAggregationService.generate_for_employee(self.org, self.employee.id, 4, 2024)

        response = self.client.post(RECORDS_URL, {'month': '4', 'year': '2024'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['records'][0]['employee'], str(other.id))
        self.assertEqual([e['id'] for e in data['skipped']], [str(self.employee.id)])

    def test_period_validation(self):
        self.assertError(self.client.post(GENERATE_URL, {'month': 13, 'year': 2024}, format='json'),
                         400, 'INVALID_MONTH')
        self.assertError(self.client.post(GENERATE_URL, {'month': 1, 'year': 1999}, format='json'),
                         400, 'INVALID_YEAR')
        self.assertError(self.client.post(GENERATE_URL, {'month': 1}, format='json'),
                         400, 'MISSING_FIELDS')

    def test_unknown_employee(self):
        response = self.client.post(
            GENERATE_URL,
            {'employee_id': '00000000-0000-0000-0000-000000000000', 'month': 4, 'year': 2024},
            format='json',
        )
        self.assertError(response, 404, 'EMPLOYEE_NOT_FOUND')

    def test_member_cannot_generate(self):
        self.login_as(self.member)
        response = self.client.post(GENERATE_URL, {'month': 4, 'year': 2024}, format='json')
        self.assertError(response, 403, 'FORBIDDEN')

    def test_mark_paid(self):
        record = PayrollAggregationService.generate_for_employee(self.org, self.employee.id, 4, 2024)
        response = self.client.post(f'{RECORDS_URL}{record.id}/mark-paid/', {'payment_date': '2024-05-03'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.status, PayrollRecord.STATUS_PAID)
        self.assertEqual(record.payment_date, datetime.date(2024, 5, 3))

        again = self.client.post(f'{RECORDS_URL}{record.id}/mark-paid/', {}, format='json')
        self.assertError(again, 409, 'ALREADY_PAID')

    def test_edit_does_not_recompute(self):
        record = PayrollAggregationService.generate_for_employee(self.org, self.employee.id, 4, 2024)
        worked_day(self.employee, datetime.date(2024, 4, 2), 480)
        response = self.client.patch(f'{RECORDS_URL}{record.id}/', {'notes': 'checked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.present_days, 1)
        self.assertEqual(record.notes, 'checked')

    def test_member_sees_only_own_payslips(self):
        mine = EmployeeFactory(organization=self.org, user=self.member)
        PayrollAggregationService.generate(self.org, 4, 2024)
        self.login_as(self.member)
        data = self.client.get(RECORDS_URL).json()['data']
        self.assertEqual([row['employee'] for row in data], [str(mine.id)])

    def test_export_csv_columns(self):
        PayrollAggregationService.generate_for_employee(self.org, self.employee.id, 4, 2024)
        PayrollAggregationService.generate_for_employee(self.org, self.employee.id, 3, 2024)

        response = self.client.get(RECORDS_URL + 'export/', {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')

        frame = pd.read_csv(io.StringIO(response.content.decode()))
        self.assertEqual(list(frame.columns), [
            'Employee', 'Email', 'Department', 'Present Days', 'Leave Days',
            'Total Hours', 'Gross Pay', 'Deductions', 'Net Pay',
        ])
        self.assertEqual(len(frame.index), 1)
        row = frame.iloc[0]
        self.assertEqual(row['Employee'], 'Anil')
        self.assertEqual(row['Present Days'], 1)
        self.assertAlmostEqual(row['Total Hours'], 8.0)
        self.assertAlmostEqual(row['Net Pay'], 850.0)

    def test_export_with_no_rows_keeps_headers(self):
        response = self.client.get(RECORDS_URL + 'export/', {'month': 1, 'year': 2030})
        header = response.content.decode().splitlines()[0]
        self.assertEqual(header, 'Employee,Email,Department,Present Days,Leave Days,Total Hours,Gross Pay,Deductions,Net Pay')


class PayrollTaskTests(TestCase):

    def test_previous_period(self):
        self.assertEqual(previous_period(datetime.date(2024, 1, 1)), (12, 2023))
        self.assertEqual(previous_period(datetime.date(2024, 7, 1)), (6, 2024))

    def test_task_generates_for_organization(self):
        org = OrganizationFactory()
        EmployeeFactory(organization=org)
        result = generate_monthly_payroll(str(org.id), month=4, year=2024)
        self.assertEqual(result['created'], 1)
        self.assertEqual(PayrollRecord.objects.filter(organization=org).count(), 1)

    def test_task_without_employees_creates_nothing(self):
        org = OrganizationFactory()
        result = generate_monthly_payroll(str(org.id), month=4, year=2024)
        self.assertEqual(result['created'], 0)

    def test_task_for_inactive_organization_is_skipped(self):
        org = OrganizationFactory(is_active=False)
        EmployeeFactory(organization=org)
        result = generate_monthly_payroll(str(org.id), month=4, year=2024)
        self.assertEqual(result['created'], 0)
        self.assertFalse(PayrollRecord.objects.exists())


class SalaryComponentTests(TestCase):

    def setUp(self):
        self.org = OrganizationFactory()
        self.employee = EmployeeFactory(organization=self.org, salary=Decimal('30000'))
        SalaryComponentFactory(employee=self.employee, name='Travel', amount=Decimal('200'))
        SalaryComponentFactory(employee=self.employee, name='HRA', is_percentage=True,
                               percentage_value=Decimal('10'))
        SalaryComponentFactory(employee=self.employee, name='Canteen', amount=Decimal('50'),
                               component_type=SalaryComponent.TYPE_DEDUCTION)
        SalaryComponentFactory(employee=self.employee, name='Old bonus', amount=Decimal('999'), is_active=False)

    def test_components_fold_into_gross_and_deductions(self):
        worked_day(self.employee, datetime.date(2024, 4, 1), 480)
        values = PayrollAggregationService.calculate(self.employee, 4, 2024)
        # basic 1000; allowances 200 + 10% of basic
        self.assertEqual(values['basic_salary'], Decimal('1000.00'))
        self.assertEqual(values['allowances'], Decimal('300.00'))
        self.assertEqual(values['gross_salary'], Decimal('1300.00'))
        # 15% of gross plus the canteen deduction
        self.assertEqual(values['deductions'], Decimal('245.00'))
        self.assertEqual(values['net_salary'], Decimal('1055.00'))

    @override_settings(PAYROLL_DEDUCTION_MODE='statutory')
    def test_statutory_mode_uses_basic_for_pf(self):
        worked_day(self.employee, datetime.date(2024, 4, 1), 480)
        values = PayrollAggregationService.calculate(self.employee, 4, 2024)
        # PF 120 on basic, ESIC 9.75 on gross, TDS 0, canteen 50
        self.assertEqual(values['pf_amount'], Decimal('120.00'))
        self.assertEqual(values['esic_amount'], Decimal('9.75'))
        self.assertEqual(values['deductions'], Decimal('179.75'))
        self.assertEqual(values['net_salary'], Decimal('1120.25'))

    def test_no_attendance_ignores_components(self):
        values = PayrollAggregationService.calculate(self.employee, 4, 2024)
        self.assertEqual(values['allowances'], Decimal('0.00'))
        self.assertEqual(values['gross_salary'], Decimal('0.00'))
        self.assertEqual(values['net_salary'], Decimal('0.00'))

    def test_other_employees_components_ignored(self):
        other = EmployeeFactory(organization=self.org, salary=Decimal('30000'))
        worked_day(other, datetime.date(2024, 4, 1), 480)
        self.assertEqual(PayrollAggregationService.calculate(other, 4, 2024)['allowances'], Decimal('0.00'))


class SalaryComponentApiTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.employee = EmployeeFactory(organization=self.org)

    def payload(self, **overrides):
        data = {
            'employee': str(self.employee.id),
            'name': 'HRA',
            'component_type': 'allowance',
            'amount': '1500.00',
        }
        data.update(overrides)
        return data

    def test_create_and_list(self):
        response = self.client.post(COMPONENTS_URL, self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        self.assertEqual(response.json()['data']['employee_name'], self.employee.name)

        response = self.client.get(COMPONENTS_URL, {'employee': str(self.employee.id)})
        self.assertEqual(response.json()['pagination']['count'], 1)

    def test_percentage_requires_value(self):
        response = self.client.post(COMPONENTS_URL, self.payload(is_percentage=True), format='json')
        self.assertError(response, 400, 'MISSING_PERCENTAGE_VALUE')

    def test_percentage_out_of_range(self):
        response = self.client.post(
            COMPONENTS_URL, self.payload(is_percentage=True, percentage_value='120'), format='json'
        )
        self.assertError(response, 400, 'INVALID_PERCENTAGE_VALUE')

    def test_negative_amount(self):
        response = self.client.post(COMPONENTS_URL, self.payload(amount='-5'), format='json')
        self.assertError(response, 400, 'INVALID_AMOUNT')

    def test_cross_tenant_employee_blocked(self):
        outsider = EmployeeFactory(organization=OrganizationFactory())
        response = self.client.post(COMPONENTS_URL, self.payload(employee=str(outsider.id)), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SalaryComponent.objects.exists())

    def test_member_forbidden(self):
        self.login_as(self.member)
        self.assertError(self.client.get(COMPONENTS_URL), 403, 'FORBIDDEN')

    def test_generation_applies_components(self):
        SalaryComponentFactory(employee=self.employee, amount=Decimal('500'))
        worked_day(self.employee, datetime.date(2024, 4, 1), 480)
        response = self.client.post(
            GENERATE_URL, {'employee_id': str(self.employee.id), 'month': 4, 'year': 2024}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        self.assertEqual(response.json()['data']['allowances'], '500.00')
        self.assertEqual(response.json()['data']['gross_salary'], '1500.00')
