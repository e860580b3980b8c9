# accounting/api/serializers/fiscal_years.py

from rest_framework import serializers

from accounting.models.fiscal_year import FiscalYear


class FiscalYearSerializer(serializers.ModelSerializer):
    class Meta:
        model = FiscalYear
        fields = ("id", "name", "start_date", "end_date", "is_locked", "locked_at", "created_at")
        read_only_fields = fields


class FiscalYearCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
