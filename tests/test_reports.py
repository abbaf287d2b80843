"""
Salary and tax reports over payroll records.
"""

import datetime
from decimal import Decimal

from django.utils import timezone
from rest_framework import status

from apps.payroll.models import PayrollRecord

from .base import TenantAPITestCase
from .factories import EmployeeFactory, OrganizationFactory

SALARY_URL = '/api/v1/reports/salary-report/'
TAX_URL = '/api/v1/reports/tax-report/'


def payslip(employee, month, year, net, tds='0', payment_date=None, **amounts):
    gross = Decimal(amounts.pop('gross', net))
    return PayrollRecord.objects.create(
        organization=employee.organization,
        employee=employee,
        month=month,
        year=year,
        basic_salary=gross,
        gross_salary=gross,
        net_salary=Decimal(net),
        tds_amount=Decimal(tds),
        pf_amount=Decimal(amounts.pop('pf', '0')),
        esic_amount=Decimal(amounts.pop('esic', '0')),
        payment_date=payment_date,
        status=PayrollRecord.STATUS_PAID if payment_date else PayrollRecord.STATUS_DRAFT,
    )


class SalaryReportTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.asha = EmployeeFactory(organization=self.org, name='Asha', department='Engineering')
        self.ravi = EmployeeFactory(organization=self.org, name='Ravi', department='')
        payslip(self.asha, 4, 2024, '20000', gross='24000', pf='1200', esic='0', tds='500',
                payment_date=datetime.date(2024, 5, 1))
        payslip(self.asha, 5, 2024, '21000', gross='25000', pf='1200', tds='600',
                payment_date=datetime.date(2024, 6, 1))
        payslip(self.ravi, 4, 2024, '15000', pf='900', esic='100',
                payment_date=datetime.date(2024, 5, 2))
        # Paid outside the range
        payslip(self.ravi, 3, 2024, '15000', payment_date=datetime.date(2024, 4, 1))
        other = EmployeeFactory(organization=OrganizationFactory())
        payslip(other, 4, 2024, '99999', payment_date=datetime.date(2024, 5, 1))

    def report(self, start='2024-05-01', end='2024-06-30'):
        return self.client.get(SALARY_URL, {'start_date': start, 'end_date': end})

    def test_totals(self):
        response = self.report()
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        data = response.json()['data']
        self.assertEqual(data['record_count'], 3)
        self.assertEqual(data['total_salaries_paid'], '56000.00')
        self.assertEqual(data['total_gross'], '64000.00')
        self.assertEqual(data['total_pf'], '3300.00')
        self.assertEqual(data['total_esic'], '100.00')
        self.assertEqual(data['total_tds'], '1100.00')
        self.assertEqual(data['total_deductions'], '4500.00')

    def test_breakdowns(self):
        data = self.report().json()['data']
        self.assertEqual(data['by_employee'][0]['employee_name'], 'Asha')
        self.assertEqual(data['by_employee'][0]['total_net'], '41000.00')
        self.assertEqual(data['by_employee'][0]['count'], 2)
        self.assertEqual(data['by_employee'][1]['department'], 'Unassigned')

        departments = [(row['department'], row['total_net']) for row in data['by_department']]
        self.assertEqual(departments, [('Engineering', '41000.00'), ('Unassigned', '15000.00')])

        months = [(row['year'], row['month'], row['total_net']) for row in data['by_month']]
        self.assertEqual(months, [(2024, 4, '35000.00'), (2024, 5, '21000.00')])

    def test_unpaid_records_count_by_creation_date(self):
        payslip(self.ravi, 5, 2024, '16000')
        today = timezone.localdate().isoformat()
        data = self.report(start=today, end=today).json()['data']
        self.assertEqual(data['record_count'], 1)
        self.assertEqual(data['total_salaries_paid'], '16000.00')

    def test_empty_range(self):
        data = self.report(start='2020-01-01', end='2020-01-31').json()['data']
        self.assertEqual(data['record_count'], 0)
        self.assertEqual(data['total_salaries_paid'], '0.00')
        self.assertEqual(data['by_employee'], [])

    def test_date_validation(self):
        self.assertError(self.client.get(SALARY_URL, {'start_date': '2024-05-01'}), 400, 'MISSING_DATE_PARAMETERS')
        self.assertError(self.report(start='01/05/2024'), 400, 'INVALID_DATE_FORMAT')
        self.assertError(self.report(start='2024-07-01'), 400, 'INVALID_DATE_RANGE')

    def test_members_forbidden(self):
        self.login_as(self.member)
        self.assertError(self.report(), 403, 'FORBIDDEN')


class TaxReportTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.asha = EmployeeFactory(organization=self.org, name='Asha')
        self.ravi = EmployeeFactory(organization=self.org, name='Ravi')
        # FY 2024-25 runs April 2024 to March 2025
        payslip(self.asha, 4, 2024, '70000', gross='80000', tds='4000')
        payslip(self.asha, 3, 2025, '70000', gross='80000', tds='4000')
        payslip(self.ravi, 12, 2024, '40000', gross='45000', tds='1000')
        payslip(self.asha, 3, 2024, '70000', gross='80000', tds='4000')
        payslip(self.ravi, 4, 2025, '40000', gross='45000', tds='1000')

    def test_financial_year_window(self):
        response = self.client.get(TAX_URL, {'financial_year': '2024-25'})
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        data = response.json()['data']
        self.assertEqual(data['start_year'], 2024)
        self.assertEqual(data['end_year'], 2025)
        self.assertEqual(data['total_tds_deducted'], '9000.00')
        self.assertEqual(data['total_gross'], '205000.00')
        first = data['by_employee'][0]
        self.assertEqual(first['employee_name'], 'Asha')
        self.assertEqual(first['total_tds'], '8000.00')
        self.assertEqual(first['months'], 2)

    def test_financial_year_validation(self):
        self.assertError(self.client.get(TAX_URL), 400, 'MISSING_FINANCIAL_YEAR')
        for value in ('2024', '2024-2025', '2024-26'):
            self.assertError(
                self.client.get(TAX_URL, {'financial_year': value}), 400, 'INVALID_FINANCIAL_YEAR_FORMAT'
            )

    def test_century_rollover(self):
        response = self.client.get(TAX_URL, {'financial_year': '2099-00'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['end_year'], 2100)
