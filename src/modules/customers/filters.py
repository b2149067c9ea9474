import django_filters

from modules.customers.models import Customer


class CustomerFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    trade_name = django_filters.CharFilter(field_name="trade_name", lookup_expr="icontains")
    active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = Customer
        fields = ["name", "trade_name", "active"]
