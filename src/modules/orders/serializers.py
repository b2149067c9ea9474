"""Order DRF serializers for API input/output.

Input serializers validate the request shape; the view then builds the
Pydantic DTOs the service consumes.  Output serializers add the derived
progress and urgency figures computed by the production core.
"""

from __future__ import annotations

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory, ProductionStage
from modules.production import mappers
from modules.production.parsing import MAX_DURATION_DAYS
from modules.production.progress import (
    delivery_performance,
    item_progress,
    order_progress,
    urgency,
)

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateStageSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    duration_days = serializers.IntegerField(
        min_value=0, max_value=MAX_DURATION_DAYS, required=False, default=1
    )
    planned_start = serializers.DateField(required=False, allow_null=True, default=None)
    planned_end = serializers.DateField(required=False, allow_null=True, default=None)


class CreateOrderItemSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, default="", allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    unit_weight = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0"), required=False, default=Decimal("0")
    )
    delivery_date = serializers.DateField(required=False, allow_null=True, default=None)
    stages = CreateStageSerializer(many=True, required=False, default=list)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    customer_id = serializers.UUIDField()
    internal_os = serializers.CharField(max_length=50, required=False, default="", allow_blank=True)
    project = serializers.CharField(max_length=255, required=False, default="", allow_blank=True)
    start_date = serializers.DateField(required=False, allow_null=True, default=None)
    delivery_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, default="", allow_blank=True)
    items = CreateOrderItemSerializer(many=True, allow_empty=False)


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)

    def to_internal_value(self, data):
        if isinstance(data, dict) and isinstance(data.get("status"), str):
            data = {**data, "status": data["status"].strip().upper()}
        return super().to_internal_value(data)


class CompleteOrderSerializer(serializers.Serializer):
    completion_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class ProductionStageSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = ProductionStage
        fields = [
            "id",
            "sequence",
            "name",
            "status",
            "status_display",
            "duration_days",
            "planned_start",
            "planned_end",
            "actual_start",
            "actual_end",
        ]
        read_only_fields = fields


class OrderItemSerializer(serializers.ModelSerializer):
    stages = ProductionStageSerializer(many=True, read_only=True)
    progress = serializers.SerializerMethodField()
    total_weight = serializers.DecimalField(max_digits=14, decimal_places=3, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "code",
            "description",
            "quantity",
            "unit_weight",
            "total_weight",
            "delivery_date",
            "finished_date",
            "progress",
            "stages",
        ]
        read_only_fields = fields

    def get_progress(self, obj: OrderItem) -> int:
        return item_progress(mappers.stages_to_domain(list(obj.stages.all())))


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["id", "old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class _DeliveryMixin(serializers.Serializer):
    """Derived progress, urgency and delivery performance of an order."""

    progress = serializers.SerializerMethodField()
    urgency = serializers.SerializerMethodField()
    delivery_status = serializers.SerializerMethodField()

    def _snapshot(self, obj: Order):
        cache = self.context.setdefault("_snapshots", {})
        if obj.pk not in cache:
            cache[obj.pk] = mappers.order_to_domain(obj)
        return cache[obj.pk]

    def _today(self):
        return self.context.get("today") or timezone.localdate()

    def get_progress(self, obj: Order) -> int:
        return order_progress(self._snapshot(obj).items)

    def get_urgency(self, obj: Order) -> str:
        snapshot = self._snapshot(obj)
        return str(urgency(snapshot.delivery_date, snapshot.status, self._today()))

    def get_delivery_status(self, obj: Order) -> dict:
        snapshot = self._snapshot(obj)
        result = delivery_performance(
            snapshot.delivery_date,
            snapshot.completion_date,
            snapshot.status,
            self._today(),
        )
        return {"performance": str(result.performance), "days": result.days}


class OrderSerializer(_DeliveryMixin, serializers.ModelSerializer):
    """Read serializer for orders with nested items, stages and history."""

    customer_name = serializers.CharField(source="customer.display_name", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_name",
            "internal_os",
            "project",
            "status",
            "start_date",
            "delivery_date",
            "completion_date",
            "total_weight",
            "notes",
            "progress",
            "urgency",
            "delivery_status",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(_DeliveryMixin, serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    customer_name = serializers.CharField(source="customer.display_name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_id",
            "customer_name",
            "status",
            "start_date",
            "delivery_date",
            "completion_date",
            "total_weight",
            "progress",
            "urgency",
            "delivery_status",
            "created_at",
        ]
        read_only_fields = fields
