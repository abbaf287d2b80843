from rest_framework import serializers


def money():
    return serializers.DecimalField(max_digits=14, decimal_places=2)


class SalaryByEmployeeSerializer(serializers.Serializer):
    employee_id = serializers.UUIDField()
    employee_name = serializers.CharField()
    department = serializers.CharField()
    total_net = money()
    total_gross = money()
    total_tds = money()
    count = serializers.IntegerField()


class SalaryByDepartmentSerializer(serializers.Serializer):
    department = serializers.CharField()
    total_net = money()
    count = serializers.IntegerField()


class SalaryByMonthSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    total_net = money()
    count = serializers.IntegerField()


class SalaryReportSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    record_count = serializers.IntegerField()
    total_salaries_paid = money()
    total_gross = money()
    total_pf = money()
    total_esic = money()
    total_tds = money()
    total_deductions = money()
    by_employee = SalaryByEmployeeSerializer(many=True)
    by_department = SalaryByDepartmentSerializer(many=True)
    by_month = SalaryByMonthSerializer(many=True)


class TaxByEmployeeSerializer(serializers.Serializer):
    employee_id = serializers.UUIDField()
    employee_name = serializers.CharField()
    total_gross = money()
    total_tds = money()
    months = serializers.IntegerField()


class TaxReportSerializer(serializers.Serializer):
    financial_year = serializers.CharField()
    start_year = serializers.IntegerField()
    end_year = serializers.IntegerField()
    total_gross = money()
    total_tds_deducted = money()
    by_employee = TaxByEmployeeSerializer(many=True)
