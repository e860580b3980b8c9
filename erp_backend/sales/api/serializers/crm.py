# sales/api/serializers/crm.py

from rest_framework import serializers

from sales.models import Customer, Lead, LeadSource, LeadStatus


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "email", "phone", "company", "address", "is_active", "created_at"]
        read_only_fields = ("id", "is_active", "created_at")


class LeadSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)

    class Meta:
        model = Lead
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "company",
            "source",
            "status",
            "expected_revenue",
            "notes",
            "customer",
            "customer_name",
            "converted_at",
            "created_at",
        ]
        read_only_fields = ("id", "status", "customer", "customer_name", "converted_at", "created_at")


class LeadCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    company = serializers.CharField(required=False, allow_blank=True, default="")
    source = serializers.ChoiceField(choices=LeadSource.choices, required=False, default=LeadSource.OTHER)
    expected_revenue = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class LeadStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=LeadStatus.choices)


class LeadConvertSerializer(serializers.Serializer):
    """Optional overrides for the new customer; blanks fall back to the lead's data."""

    name = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    company = serializers.CharField(required=False, allow_blank=True, default="")
    address = serializers.CharField(required=False, allow_blank=True, default="")


class PipelineStageSerializer(serializers.Serializer):
    status = serializers.CharField()
    count = serializers.IntegerField()
    expected_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class PipelineSerializer(serializers.Serializer):
    pipeline = PipelineStageSerializer(many=True)
    total = serializers.IntegerField()
    open = serializers.IntegerField()
