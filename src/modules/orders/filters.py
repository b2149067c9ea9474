import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    customer = django_filters.UUIDFilter(field_name="customer_id")
    order_number = django_filters.CharFilter(field_name="order_number", lookup_expr="icontains")
    internal_os = django_filters.CharFilter(field_name="internal_os", lookup_expr="iexact")
    delivery_from = django_filters.DateFilter(field_name="delivery_date", lookup_expr="gte")
    delivery_to = django_filters.DateFilter(field_name="delivery_date", lookup_expr="lte")
    open = django_filters.BooleanFilter(field_name="completion_date", lookup_expr="isnull")

    class Meta:
        model = Order
        fields = [
            "status",
            "customer",
            "order_number",
            "internal_os",
            "delivery_from",
            "delivery_to",
            "open",
        ]
