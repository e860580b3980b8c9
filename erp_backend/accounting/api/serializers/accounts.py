# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account, AccountType


class AccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = ("id", "code", "name", "account_type", "parent", "is_active", "created_at")
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    account_type = serializers.ChoiceField(choices=AccountType.choices)
    parent_id = serializers.IntegerField(required=False, allow_null=True)


class AccountUpdateSerializer(serializers.Serializer):
    """
    Partial update: only the keys sent are applied.
    parent_id=null detaches the account from its parent.
    """

    name = serializers.CharField(max_length=150, required=False)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)
