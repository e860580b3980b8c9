# accounting/api/serializers/journal_entries.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.journal import JournalEntry, JournalLine


class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = ("id", "account", "account_code", "account_name", "debit", "credit", "memo")
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)
    fiscal_year_name = serializers.CharField(source="fiscal_year.name", read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "fiscal_year",
            "fiscal_year_name",
            "date",
            "reference",
            "memo",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=Decimal("0.00"))
    memo = serializers.CharField(required=False, allow_blank=True, default="")


class JournalEntryCreateSerializer(serializers.Serializer):
    """
    Shape-only validation. Accounting rules (balance, fiscal year lock and
    range, reference idempotency) belong to journal_entry_service.
    """

    fiscal_year_id = serializers.IntegerField()
    date = serializers.DateField()
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    memo = serializers.CharField(required=False, allow_blank=True, default="")
    lines = JournalLineInputSerializer(many=True)
