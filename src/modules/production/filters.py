import django_filters

from modules.production.models import Appointment


class AppointmentFilter(django_filters.FilterSet):
    order = django_filters.UUIDFilter(field_name="order_id")
    item = django_filters.UUIDFilter(field_name="item_id")
    action = django_filters.CharFilter(field_name="action", lookup_expr="iexact")
    operator = django_filters.CharFilter(field_name="operator_id")
    occurred_from = django_filters.DateTimeFilter(field_name="occurred_at", lookup_expr="gte")
    occurred_to = django_filters.DateTimeFilter(field_name="occurred_at", lookup_expr="lte")

    class Meta:
        model = Appointment
        fields = ["order", "item", "action", "operator", "occurred_from", "occurred_to"]
