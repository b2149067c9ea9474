"""Customer output serializer.

Input is validated by the Pydantic DTOs; the serializer only renders.
The document is masked in every response.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.customers.models import Customer, mask_document


class CustomerSerializer(serializers.ModelSerializer):
    document = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "trade_name",
            "document",
            "document_type",
            "email",
            "phone",
            "contact_name",
            "address",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_document(self, obj: Customer) -> str:
        return mask_document(obj.document)
