import uuid
import django.db.models.deletion
import django.utils.timezone
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
        ('organization', models.ForeignKey(help_text='Organization this record belongs to (primary isolation key)', on_delete=django.db.models.deletion.CASCADE, related_name=f'attendance_{prefix}_set', to='core.organization')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('employees', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='NFCTag',
            fields=_entity_fields('nfctag') + [
                ('tag_uid', models.CharField(db_index=True, max_length=100)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive'), ('lost', 'Lost'), ('damaged', 'Damaged')], db_index=True, default='active', max_length=20)),
                ('enrolled_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('reader_id', models.CharField(blank=True, max_length=100)),
                ('employee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='nfc_tags', to='employees.employee')),
                ('enrolled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='enrolled_tags', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'nfc_tags',
                'ordering': ['-enrolled_at'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('organization', 'tag_uid'), name='uniq_nfc_tag_uid_per_org'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReaderDevice',
            fields=_entity_fields('readerdevice') + [
                ('reader_id', models.CharField(db_index=True, max_length=100)),
                ('name', models.CharField(max_length=200)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('reader_type', models.CharField(choices=[('usb', 'USB'), ('ethernet', 'Ethernet'), ('mobile', 'Mobile')], default='usb', max_length=20)),
                ('status', models.CharField(choices=[('online', 'Online'), ('offline', 'Offline'), ('maintenance', 'Maintenance')], db_index=True, default='offline', max_length=20)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('last_heartbeat', models.DateTimeField(blank=True, null=True)),
                ('config', models.JSONField(blank=True, default=dict)),
            ],
            options={
                'db_table': 'reader_devices',
                'ordering': ['name'],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('organization', 'reader_id'), name='uniq_reader_id_per_org'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AttendanceRecord',
            fields=_entity_fields('attendancerecord') + [
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('date', models.DateField(db_index=True)),
                ('time_in', models.DateTimeField()),
                ('time_out', models.DateTimeField(blank=True, null=True)),
                ('duration', models.PositiveIntegerField(blank=True, help_text='Worked minutes', null=True)),
                ('status', models.CharField(choices=[('present', 'Present'), ('late', 'Late'), ('absent', 'Absent'), ('leave', 'Leave')], db_index=True, default='present', max_length=20)),
                ('check_in_method', models.CharField(choices=[('nfc', 'NFC'), ('manual', 'Manual'), ('geolocation', 'Geolocation')], default='nfc', max_length=20)),
                ('reader_id', models.CharField(blank=True, db_index=True, max_length=100)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('latitude', models.DecimalField(blank=True, decimal_places=8, max_digits=10, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=8, max_digits=11, null=True)),
                ('tag_uid', models.CharField(blank=True, max_length=100)),
                ('idempotency_key', models.CharField(blank=True, max_length=255, null=True)),
                ('notes', models.TextField(blank=True)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance_records', to='employees.employee')),
            ],
            options={
                'db_table': 'attendance_records',
                'ordering': ['-date', '-time_in'],
                'indexes': [
                    models.Index(fields=['organization', 'date'], name='att_org_date_idx'),
                    models.Index(fields=['organization', 'employee', 'date'], name='att_org_emp_date_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('employee', 'date'), name='uniq_attendance_employee_date'),
                    models.UniqueConstraint(condition=models.Q(('idempotency_key__isnull', False), ('is_deleted', False)), fields=('organization', 'idempotency_key'), name='uniq_attendance_idempotency_key'),
                ],
            },
        ),
    ]
