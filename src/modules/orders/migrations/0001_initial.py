import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid6
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

ORDER_STATUS_CHOICES = [
    ("IN_PROGRESS", "Em Processo"),
    ("ON_HOLD", "Em Espera"),
    ("DELAYED", "Atrasado"),
    ("SHIPPED", "Enviado"),
    ("COMPLETED", "Concluído"),
    ("CANCELLED", "Cancelado"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, default=None, null=True),
                ),
                ("order_number", models.CharField(editable=False, max_length=20, unique=True)),
                ("internal_os", models.CharField(blank=True, default="", max_length=50)),
                ("project", models.CharField(blank=True, default="", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=ORDER_STATUS_CHOICES, default="IN_PROGRESS", max_length=20
                    ),
                ),
                ("start_date", models.DateField(default=django.utils.timezone.localdate)),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("completion_date", models.DateField(blank=True, null=True)),
                (
                    "total_weight",
                    models.DecimalField(
                        decimal_places=3, default=Decimal("0.000"), max_digits=12
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "idempotency_key",
                    models.CharField(blank=True, max_length=255, null=True, unique=True),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["delivery_date"], name="orders_delivery_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, db_index=True, default=None, null=True),
                ),
                ("code", models.CharField(max_length=50)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "unit_weight",
                    models.DecimalField(
                        decimal_places=3, default=Decimal("0.000"), max_digits=12
                    ),
                ),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("finished_date", models.DateField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "order_items",
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=1),
                        name="order_items_quantity_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductionStage",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sequence", models.PositiveSmallIntegerField()),
                ("name", models.CharField(max_length=100)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Não Iniciado"),
                            ("IN_PROGRESS", "Em Andamento"),
                            ("COMPLETED", "Concluído"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("duration_days", models.IntegerField(blank=True, default=1, null=True)),
                ("planned_start", models.DateField(blank=True, null=True)),
                ("planned_end", models.DateField(blank=True, null=True)),
                ("actual_start", models.DateTimeField(blank=True, null=True)),
                ("actual_end", models.DateTimeField(blank=True, null=True)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stages",
                        to="orders.orderitem",
                    ),
                ),
            ],
            options={
                "db_table": "production_stages",
                "ordering": ["item", "sequence"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("item", "sequence"),
                        name="production_stages_item_sequence_uniq",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "old_status",
                    models.CharField(
                        blank=True, choices=ORDER_STATUS_CHOICES, max_length=20, null=True
                    ),
                ),
                ("new_status", models.CharField(choices=ORDER_STATUS_CHOICES, max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "order_status_history",
                "ordering": ["-created_at"],
            },
        ),
    ]
