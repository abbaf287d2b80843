import datetime

from rest_framework import status

from apps.billing.models import Invoice, Payment
from apps.billing.services import InvoiceService
from apps.billing.tasks import mark_overdue_invoices
from apps.core.utils import local_today

from .base import TenantAPITestCase
from .factories import ClientFactory, InvoiceFactory, OrganizationFactory

INVOICES_URL = '/api/v1/billing/invoices/'


class InvoiceCreateTests(TenantAPITestCase):

    def payload(self, **overrides):
        data = {
            'client_name': 'Acme Traders',
            'client_email': ' Accounts@Acme.example ',
            'issue_date': '2024-05-10',
            'due_date': '2024-06-09',
            'tax_rate': '18.00',
            'items': [
                {'description': 'Reader install', 'quantity': '2', 'unit_price': '1500.00'},
                {'description': 'NFC cards', 'quantity': '1', 'unit_price': '250.50'},
            ],
        }
        data.update(overrides)
        return data

    def test_totals_come_from_items(self):
        response = self.client.post(INVOICES_URL, self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()['data']
        self.assertEqual(data['subtotal'], '3250.50')
        self.assertEqual(data['tax_amount'], '585.09')
        self.assertEqual(data['total_amount'], '3835.59')
        self.assertEqual(data['client_email'], 'accounts@acme.example')
        self.assertEqual(len(data['items']), 2)
        self.assertEqual(data['items'][0]['amount'], '3000.00')

    def test_client_supplied_totals_are_ignored(self):
        response = self.client.post(
            INVOICES_URL, self.payload(total_amount='1.00', items=[]), format='json'
        )
        self.assertEqual(response.json()['data']['total_amount'], '0.00')

    def test_numbers_are_sequential_per_month(self):
        first = self.client.post(INVOICES_URL, self.payload(), format='json').json()['data']
        second = self.client.post(INVOICES_URL, self.payload(), format='json').json()['data']
        june = self.client.post(
            INVOICES_URL, self.payload(issue_date='2024-06-01', due_date='2024-06-30'), format='json'
        ).json()['data']
        self.assertEqual(first['invoice_number'], 'INV-202405-0001')
        self.assertEqual(second['invoice_number'], 'INV-202405-0002')
        self.assertEqual(june['invoice_number'], 'INV-202406-0001')

    def test_deleted_invoice_keeps_its_number(self):
        first = self.client.post(INVOICES_URL, self.payload(), format='json').json()['data']
        self.client.delete(f"{INVOICES_URL}{first['id']}/")
        second = self.client.post(INVOICES_URL, self.payload(), format='json').json()['data']
        self.assertEqual(second['invoice_number'], 'INV-202405-0002')

    def test_due_date_before_issue_date(self):
        response = self.client.post(INVOICES_URL, self.payload(due_date='2024-05-01'), format='json')
        self.assertError(response, 400, 'INVALID_DUE_DATE')
        self.assertFalse(Invoice.objects.exists())

    def test_paid_status_cannot_be_set(self):
        response = self.client.post(INVOICES_URL, self.payload(status='paid'), format='json')
        self.assertError(response, 400, 'VALIDATION_ERROR')

    def test_client_from_another_organization_rejected(self):
        foreign = ClientFactory(organization=OrganizationFactory())
        response = self.client.post(INVOICES_URL, self.payload(client=str(foreign.id)), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_updating_items_recomputes_totals(self):
        invoice_id = self.client.post(INVOICES_URL, self.payload(), format='json').json()['data']['id']
        response = self.client.patch(f'{INVOICES_URL}{invoice_id}/', {
            'tax_rate': '0',
            'items': [{'description': 'Support', 'quantity': '3', 'unit_price': '100'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        self.assertEqual(response.json()['data']['total_amount'], '300.00')

    def test_member_forbidden(self):
        self.login_as(self.member)
        self.assertError(self.client.get(INVOICES_URL), 403, 'FORBIDDEN')


class PaymentTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        response = self.client.post(INVOICES_URL, {
            'client_name': 'Globex',
            'client_email': 'ap@globex.example',
            'due_date': (local_today(self.org) + datetime.timedelta(days=15)).isoformat(),
            'items': [{'description': 'Subscription', 'quantity': '1', 'unit_price': '1000.00'}],
        }, format='json')
        self.invoice_id = response.json()['data']['id']
        self.payments_url = f'{INVOICES_URL}{self.invoice_id}/payments/'

    def pay(self, amount):
        return self.client.post(
            self.payments_url, {'amount': amount, 'payment_method': 'bank_transfer'}, format='json'
        )

    def test_partial_then_full_payment(self):
        first = self.pay('400.00')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.content)
        self.assertEqual(first.json()['invoice_status'], 'draft')

        second = self.pay('600.00')
        self.assertEqual(second.json()['invoice_status'], 'paid')
        invoice = Invoice.objects.get(id=self.invoice_id)
        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertIsNotNone(invoice.paid_at)

        listing = self.client.get(self.payments_url).json()
        self.assertEqual(len(listing['data']), 2)
        self.assertEqual(listing['total_paid'], '1000.00')

    def test_amount_paid_has_two_places(self):
        invoice = Invoice.objects.get(id=self.invoice_id)
        self.assertEqual(str(InvoiceService.amount_paid(invoice)), '0.00')
        self.pay('400')
        self.assertEqual(str(InvoiceService.amount_paid(invoice)), '400.00')

    def test_payment_on_paid_invoice_conflicts(self):
        self.pay('1000.00')
        response = self.pay('10.00')
        self.assertError(response, 409, 'INVOICE_ALREADY_PAID')
        self.assertEqual(Payment.objects.count(), 1)

    def test_payment_defaults_to_today(self):
        data = self.pay('5.00').json()['data']
        self.assertEqual(data['payment_date'], local_today(self.org).isoformat())

    def test_non_positive_amount_rejected(self):
        self.assertError(self.pay('0'), 400, 'VALIDATION_ERROR')


class OverdueTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        today = local_today(self.org)
        self.late = InvoiceFactory(
            organization=self.org, issue_date=today - datetime.timedelta(days=40),
            due_date=today - datetime.timedelta(days=10), status=Invoice.STATUS_SENT,
        )
        self.paid = InvoiceFactory(
            organization=self.org, issue_date=today - datetime.timedelta(days=40),
            due_date=today - datetime.timedelta(days=10), status=Invoice.STATUS_PAID,
        )
        self.current = InvoiceFactory(organization=self.org, issue_date=today, due_date=today)
        self.foreign = InvoiceFactory(
            issue_date=today - datetime.timedelta(days=40), due_date=today - datetime.timedelta(days=10),
        )

    def test_overdue_listing(self):
        response = self.client.get(INVOICES_URL + 'overdue/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['pagination']['count'], 1)
        self.assertEqual(body['data'][0]['id'], str(self.late.id))
        self.assertEqual(body['data'][0]['days_overdue'], 10)

    def test_mark_overdue(self):
        self.assertEqual(InvoiceService.mark_overdue(self.org), 1)
        self.late.refresh_from_db()
        self.paid.refresh_from_db()
        self.assertEqual(self.late.status, Invoice.STATUS_OVERDUE)
        self.assertEqual(self.paid.status, Invoice.STATUS_PAID)
        # Already overdue rows are not touched again
        self.assertEqual(InvoiceService.mark_overdue(self.org), 0)

    def test_task_only_touches_its_organization(self):
        self.assertEqual(mark_overdue_invoices(str(self.org.id)), 1)
        self.foreign.refresh_from_db()
        self.assertEqual(self.foreign.status, Invoice.STATUS_DRAFT)

    def test_status_filter(self):
        response = self.client.get(INVOICES_URL, {'status': 'paid'})
        self.assertEqual([row['id'] for row in response.json()['data']], [str(self.paid.id)])
