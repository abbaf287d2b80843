import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _entity_fields(prefix):
    """Columns shared by every organization-scoped table."""
    return [
        ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('is_deleted', models.BooleanField(db_index=True, default=False)),
        ('deleted_at', models.DateTimeField(blank=True, null=True)),
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('is_active', models.BooleanField(db_index=True, default=True)),
        ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=f'{prefix}_created', to=settings.AUTH_USER_MODEL)),
        ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=f'{prefix}_updated', to=settings.AUTH_USER_MODEL)),
        ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name=f'{prefix}_deleted', to=settings.AUTH_USER_MODEL)),
        ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name=f'crm_{prefix}_set', to='core.organization')),
    ]


def _document_fields(prefix):
    """Fields of the client-or-lead sales documents."""
    return _entity_fields(prefix) + [
        ('title', models.CharField(max_length=255)),
        ('description', models.TextField(blank=True)),
        ('sent_at', models.DateTimeField(blank=True, null=True)),
        ('accepted_at', models.DateTimeField(blank=True, null=True)),
        ('rejected_at', models.DateTimeField(blank=True, null=True)),
        ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name=f'{prefix}s', to='crm.client')),
        ('lead', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name=f'{prefix}s', to='crm.lead')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Lead',
            fields=_entity_fields('lead') + [
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('source', models.CharField(blank=True, max_length=100)),
                ('stage', models.CharField(choices=[('new', 'New'), ('contacted', 'Contacted'), ('proposal', 'Proposal'), ('won', 'Won'), ('lost', 'Lost')], db_index=True, default='new', max_length=20)),
                ('value', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('next_follow_up', models.DateField(blank=True, null=True)),
                ('won_at', models.DateTimeField(blank=True, null=True)),
                ('lost_reason', models.TextField(blank=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_leads', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'crm_leads',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Client',
            fields=_entity_fields('client') + [
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('address', models.TextField(blank=True)),
                ('industry', models.CharField(blank=True, max_length=100)),
                ('company_size', models.CharField(blank=True, choices=[('1-10', '1-10'), ('11-50', '11-50'), ('51-200', '51-200'), ('201-500', '201-500'), ('500+', '500+')], max_length=10)),
                ('annual_revenue', models.DecimalField(blank=True, decimal_places=2, max_digits=16, null=True)),
                ('website', models.URLField(blank=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('on_hold', 'On Hold')], db_index=True, default='active', max_length=20)),
                ('account_manager', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_clients', to=settings.AUTH_USER_MODEL)),
                ('lead', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='client', to='crm.lead')),
            ],
            options={
                'db_table': 'crm_clients',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Contract',
            fields=_entity_fields('contract') + [
                ('contract_number', models.CharField(db_index=True, max_length=50)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('expired', 'Expired'), ('terminated', 'Terminated')], db_index=True, default='draft', max_length=20)),
                ('document_url', models.URLField(blank=True, max_length=500)),
                ('signed_by', models.CharField(blank=True, max_length=255)),
                ('signed_at', models.DateTimeField(blank=True, null=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contracts', to='crm.client')),
            ],
            options={
                'db_table': 'crm_contracts',
                'ordering': ['-start_date'],
                'constraints': [
                    models.UniqueConstraint(fields=('organization', 'contract_number'), name='uniq_contract_number_per_org'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Proposal',
            fields=_document_fields('proposal') + [
                ('proposal_number', models.CharField(db_index=True, max_length=50)),
                ('scope_of_work', models.TextField(blank=True)),
                ('deliverables', models.TextField(blank=True)),
                ('timeline', models.CharField(blank=True, max_length=255)),
                ('pricing', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('accepted', 'Accepted'), ('rejected', 'Rejected')], db_index=True, default='draft', max_length=20)),
                ('rejection_reason', models.TextField(blank=True)),
            ],
            options={
                'db_table': 'crm_proposals',
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('organization', 'proposal_number'), name='uniq_proposal_number_per_org'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Quotation',
            fields=_document_fields('quotation') + [
                ('quotation_number', models.CharField(db_index=True, max_length=50)),
                ('subtotal', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0)])),
                ('tax_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('valid_until', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('expired', 'Expired')], db_index=True, default='draft', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('terms_conditions', models.TextField(blank=True)),
                ('rejected_reason', models.TextField(blank=True)),
            ],
            options={
                'db_table': 'crm_quotations',
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('organization', 'quotation_number'), name='uniq_quotation_number_per_org'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QuotationItem',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(max_length=500)),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('1'), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('quotation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='crm.quotation')),
            ],
            options={
                'db_table': 'crm_quotation_items',
                'ordering': ['created_at'],
            },
        ),
    ]
