from django.apps import AppConfig


class PayrollConfig(AppConfig):
    name = 'apps.payroll'
    verbose_name = 'Payroll'
