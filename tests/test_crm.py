"""
CRM pipeline: leads, conversion, contracts and the proposal / quotation workflow.
"""

import datetime

from rest_framework import status

from apps.core.utils import local_today
from apps.crm.models import Client, Contract, Lead, Proposal, Quotation

from .base import TenantAPITestCase
from .factories import ClientFactory, LeadFactory, OrganizationFactory

CRM_URL = '/api/v1/crm/'


class LeadTests(TenantAPITestCase):

    def test_create_lead(self):
        response = self.client.post(CRM_URL + 'leads/', {
            'name': 'Initech', 'email': ' Sales@Initech.example ', 'source': 'website', 'value': '25000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        lead = Lead.objects.get()
        self.assertEqual(lead.email, 'sales@initech.example')
        self.assertEqual(lead.stage, Lead.STAGE_NEW)

    def test_moving_to_won_stamps_won_at(self):
        lead = LeadFactory(organization=self.org)
        self.client.patch(f'{CRM_URL}leads/{lead.id}/', {'stage': 'won'}, format='json')
        lead.refresh_from_db()
        self.assertIsNotNone(lead.won_at)

    def test_convert_won_lead(self):
        lead = LeadFactory(organization=self.org, stage=Lead.STAGE_WON, phone='98450 00000')
        response = self.client.post(f'{CRM_URL}leads/{lead.id}/convert/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()['data']
        self.assertEqual(data['name'], lead.name)
        self.assertEqual(data['lead'], str(lead.id))
        self.assertEqual(data['status'], 'active')

        client = Client.objects.get(lead=lead)
        self.assertEqual(client.organization, self.org)
        self.assertEqual(client.phone, '98450 00000')

        detail = self.client.get(f'{CRM_URL}leads/{lead.id}/').json()['data']
        self.assertTrue(detail['is_converted'])

    def test_convert_requires_won_stage(self):
        lead = LeadFactory(organization=self.org, stage=Lead.STAGE_CONTACTED)
        response = self.client.post(f'{CRM_URL}leads/{lead.id}/convert/')
        self.assertError(response, 400, 'LEAD_NOT_WON')
        self.assertFalse(Client.objects.exists())

    def test_convert_twice(self):
        lead = LeadFactory(organization=self.org, stage=Lead.STAGE_WON)
        self.client.post(f'{CRM_URL}leads/{lead.id}/convert/')
        response = self.client.post(f'{CRM_URL}leads/{lead.id}/convert/')
        self.assertError(response, 409, 'LEAD_ALREADY_CONVERTED')
        self.assertEqual(Client.objects.count(), 1)

    def test_overdue_follow_ups(self):
        today = local_today(self.org)
        due = LeadFactory(organization=self.org, next_follow_up=today - datetime.timedelta(days=2))
        LeadFactory(organization=self.org, next_follow_up=today + datetime.timedelta(days=2))
        LeadFactory(organization=self.org, stage=Lead.STAGE_LOST, next_follow_up=today - datetime.timedelta(days=2))
        LeadFactory(next_follow_up=today - datetime.timedelta(days=2))

        data = self.client.get(CRM_URL + 'leads/overdue/').json()['data']
        self.assertEqual([row['id'] for row in data], [str(due.id)])

    def test_member_can_read_but_not_write(self):
        LeadFactory(organization=self.org)
        self.login_as(self.member)
        self.assertEqual(self.client.get(CRM_URL + 'leads/').status_code, status.HTTP_200_OK)
        response = self.client.post(CRM_URL + 'leads/', {'name': 'X', 'email': 'x@example.com'}, format='json')
        self.assertError(response, 403, 'FORBIDDEN')


class ContractTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.customer = ClientFactory(organization=self.org)

    def payload(self, **overrides):
        data = {
            'client': str(self.customer.id),
            'title': 'Annual maintenance',
            'value': '120000',
            'start_date': '2024-04-01',
            'end_date': '2025-03-31',
        }
        data.update(overrides)
        return data

    def test_number_is_allocated(self):
        response = self.client.post(CRM_URL + 'contracts/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        today = local_today(self.org)
        self.assertEqual(response.json()['data']['contract_number'], f"CON-{today:%Y%m}-0001")
        self.assertEqual(response.json()['data']['client_name'], self.customer.name)

    def test_explicit_duplicate_number(self):
        self.client.post(CRM_URL + 'contracts/', self.payload(contract_number='CON-MANUAL-1'), format='json')
        response = self.client.post(CRM_URL + 'contracts/', self.payload(contract_number='CON-MANUAL-1'), format='json')
        self.assertError(response, 409, 'DUPLICATE_NUMBER')
        self.assertEqual(Contract.objects.count(), 1)

    def test_end_before_start(self):
        response = self.client.post(CRM_URL + 'contracts/', self.payload(end_date='2024-03-01'), format='json')
        self.assertError(response, 400, 'INVALID_DATE_RANGE')

    def test_client_from_another_organization(self):
        foreign = ClientFactory(organization=OrganizationFactory())
        response = self.client.post(CRM_URL + 'contracts/', self.payload(client=str(foreign.id)), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_expiring(self):
        today = local_today(self.org)
        soon = Contract.objects.create(
            organization=self.org, client=self.customer, contract_number='C-1', title='Soon',
            start_date=today - datetime.timedelta(days=300), end_date=today + datetime.timedelta(days=10),
            status=Contract.STATUS_ACTIVE,
        )
        Contract.objects.create(
            organization=self.org, client=self.customer, contract_number='C-2', title='Later',
            start_date=today, end_date=today + datetime.timedelta(days=90), status=Contract.STATUS_ACTIVE,
        )
        Contract.objects.create(
            organization=self.org, client=self.customer, contract_number='C-3', title='Draft',
            start_date=today, end_date=today + datetime.timedelta(days=5),
        )

        data = self.client.get(CRM_URL + 'contracts/expiring/').json()['data']
        self.assertEqual([row['id'] for row in data], [str(soon.id)])
        self.assertEqual(data[0]['days_until_expiration'], 10)

        wider = self.client.get(CRM_URL + 'contracts/expiring/', {'days': 120}).json()['data']
        self.assertEqual(len(wider), 2)

    def test_expiring_bad_days(self):
        response = self.client.get(CRM_URL + 'contracts/expiring/', {'days': 'soon'})
        self.assertError(response, 400, 'INVALID_DAYS')


class ProposalTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.lead = LeadFactory(organization=self.org)

    def create(self, **overrides):
        data = {'lead': str(self.lead.id), 'title': 'NFC rollout', 'pricing': '90000'}
        data.update(overrides)
        return self.client.post(CRM_URL + 'proposals/', data, format='json')

    def test_client_or_lead_required(self):
        response = self.create(lead=None)
        self.assertError(response, 400, 'VALIDATION_ERROR')
        self.assertIn('client', response.json()['error']['details'])

    def test_send_then_accept(self):
        proposal_id = self.create().json()['data']['id']

        sent = self.client.post(f'{CRM_URL}proposals/{proposal_id}/send/')
        self.assertEqual(sent.status_code, status.HTTP_200_OK, sent.content)
        self.assertEqual(sent.json()['data']['status'], 'sent')
        self.assertIsNotNone(sent.json()['data']['sent_at'])

        accepted = self.client.post(f'{CRM_URL}proposals/{proposal_id}/accept/')
        self.assertEqual(accepted.json()['data']['status'], 'accepted')

        again = self.client.post(f'{CRM_URL}proposals/{proposal_id}/reject/', {'reason': 'late'}, format='json')
        self.assertError(again, 409, 'INVALID_STATUS_TRANSITION')

    def test_send_twice_is_rejected(self):
        proposal_id = self.create().json()['data']['id']
        self.client.post(f'{CRM_URL}proposals/{proposal_id}/send/')
        self.assertError(self.client.post(f'{CRM_URL}proposals/{proposal_id}/send/'), 409, 'INVALID_STATUS_TRANSITION')

    def test_reject_stores_reason(self):
        proposal_id = self.create().json()['data']['id']
        self.client.post(f'{CRM_URL}proposals/{proposal_id}/reject/', {'reason': 'Budget cut'}, format='json')
        proposal = Proposal.objects.get(id=proposal_id)
        self.assertEqual(proposal.status, 'rejected')
        self.assertEqual(proposal.rejection_reason, 'Budget cut')

    def test_status_is_not_writable(self):
        proposal_id = self.create(status='accepted').json()['data']['id']
        self.assertEqual(Proposal.objects.get(id=proposal_id).status, 'draft')

    def test_numbers_skip_deleted_documents(self):
        first = self.create().json()['data']
        self.client.delete(f"{CRM_URL}proposals/{first['id']}/")
        second = self.create().json()['data']
        self.assertTrue(first['proposal_number'].endswith('-0001'))
        self.assertTrue(second['proposal_number'].endswith('-0002'))


class QuotationTests(TenantAPITestCase):

    def setUp(self):
        super().setUp()
        self.customer = ClientFactory(organization=self.org)

    def create(self, **overrides):
        data = {
            'client': str(self.customer.id),
            'title': 'Readers for floor 2',
            'tax_rate': '18',
            'valid_until': (local_today(self.org) + datetime.timedelta(days=30)).isoformat(),
            'items': [
                {'description': 'Wall reader', 'quantity': '4', 'unit_price': '2500'},
                {'description': 'Cards (pack)', 'quantity': '2', 'unit_price': '499.99'},
            ],
        }
        data.update(overrides)
        return self.client.post(CRM_URL + 'quotations/', data, format='json')

    def test_totals_from_items(self):
        response = self.create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        data = response.json()['data']
        self.assertTrue(data['quotation_number'].startswith('QUO-'))
        self.assertEqual(data['subtotal'], '10999.98')
        self.assertEqual(data['tax_amount'], '1980.00')
        self.assertEqual(data['total_amount'], '12979.98')
        self.assertEqual(len(data['items']), 2)

    def test_item_update_recomputes(self):
        quotation_id = self.create().json()['data']['id']
        response = self.client.patch(f'{CRM_URL}quotations/{quotation_id}/', {
            'items': [{'description': 'Wall reader', 'quantity': '1', 'unit_price': '2500'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.content)
        self.assertEqual(response.json()['data']['total_amount'], '2950.00')

    def test_expired_quotation_cannot_be_accepted(self):
        quotation_id = self.create().json()['data']['id']
        Quotation.objects.filter(id=quotation_id).update(valid_until=local_today(self.org) - datetime.timedelta(days=1))
        response = self.client.post(f'{CRM_URL}quotations/{quotation_id}/accept/')
        self.assertError(response, 409, 'QUOTATION_EXPIRED')
        self.assertEqual(Quotation.objects.get(id=quotation_id).status, 'draft')

    def test_accept_within_validity(self):
        quotation_id = self.create().json()['data']['id']
        response = self.client.post(f'{CRM_URL}quotations/{quotation_id}/accept/')
        self.assertEqual(response.json()['data']['status'], 'accepted')

    def test_lead_only_quotation(self):
        lead = LeadFactory(organization=self.org)
        response = self.create(client=None, lead=str(lead.id))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
