import django.db.models.deletion
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("stage_index", models.PositiveSmallIntegerField()),
                ("stage_name", models.CharField(max_length=100)),
                (
                    "action",
                    models.CharField(
                        choices=[("start", "Início"), ("finish", "Finalização")],
                        max_length=10,
                    ),
                ),
                ("occurred_at", models.DateTimeField()),
                ("operator_id", models.CharField(max_length=100)),
                ("operator_name", models.CharField(max_length=255)),
                ("operator_email", models.EmailField(blank=True, default="", max_length=254)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="appointments",
                        to="orders.order",
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="appointments",
                        to="orders.orderitem",
                    ),
                ),
                (
                    "stage",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="appointments",
                        to="orders.productionstage",
                    ),
                ),
            ],
            options={
                "db_table": "production_appointments",
                "ordering": ["-occurred_at"],
                "indexes": [
                    models.Index(
                        fields=["order", "occurred_at"], name="appointments_order_idx"
                    ),
                ],
            },
        ),
    ]
