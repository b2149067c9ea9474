"""Production serializers.

Appointment input is validated by ``RegisterAppointmentDTO``; these
serializers render appointments and validate dashboard query parameters.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.production.models import Appointment


class AppointmentSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "order_id",
            "order_number",
            "item_id",
            "stage_id",
            "stage_index",
            "stage_name",
            "action",
            "occurred_at",
            "operator_id",
            "operator_name",
            "operator_email",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class SummaryQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and end < start:
            raise serializers.ValidationError("end must not be before start.")
        return attrs


class RankingQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False)
