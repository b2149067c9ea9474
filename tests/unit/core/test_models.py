"""Unit tests for the shared base models, exercised through domain models.

``Customer`` and ``Order`` are soft-deletable; ``Appointment`` and
``ProductionStage`` are plain ``BaseModel`` rows.
"""

from __future__ import annotations

import uuid

import pytest
from freezegun import freeze_time

from django.utils import timezone

from modules.core.models import SoftDeleteManager, SoftDeleteQuerySet
from modules.customers.models import Customer, DocumentType

pytestmark = pytest.mark.unit


def _customer(idx: int) -> Customer:
    return Customer.objects.create(
        name=f"Serralheria {idx}",
        document=f"{idx:014d}",
        document_type=DocumentType.CNPJ,
        email=f"serralheria{idx}@example.com",
    )


class TestBaseModel:
    def test_id_is_uuid7(self, customer):
        assert isinstance(customer.id, uuid.UUID)
        assert customer.id.version == 7

    def test_ids_follow_creation_order(self):
        first, second = _customer(1), _customer(2)
        assert str(first.id) < str(second.id)

    def test_id_is_not_editable(self):
        assert Customer._meta.get_field("id").editable is False

    def test_partial_save_bumps_updated_at(self, customer):
        before = customer.updated_at
        customer.phone = "(11) 4000-0000"
        customer.save(update_fields=["phone"])
        customer.refresh_from_db()
        assert customer.updated_at > before

    def test_created_at_is_stable(self, customer):
        created = customer.created_at
        customer.contact_name = "Marta"
        customer.save()
        customer.refresh_from_db()
        assert customer.created_at == created

    def test_stage_rows_get_timestamps(self, make_order):
        stage = make_order().items.all()[0].stages.all()[0]
        assert stage.created_at is not None
        assert stage.updated_at is not None


class TestSoftDeleteModel:
    def test_delete_marks_row(self, customer):
        result = customer.delete()
        customer.refresh_from_db()
        assert customer.is_deleted is True
        assert result == (1, {"customers.Customer": 1})

    def test_second_delete_is_noop(self, customer):
        customer.delete()
        assert customer.delete() == (0, {})

    def test_deleted_rows_stay_in_objects(self, customer):
        customer.delete()
        assert Customer.objects.filter(pk=customer.pk).exists()
        assert not Customer.objects.alive().filter(pk=customer.pk).exists()
        assert Customer.objects.dead().filter(pk=customer.pk).exists()

    def test_restore(self, customer):
        customer.delete()
        customer.restore()
        customer.refresh_from_db()
        assert customer.deleted_at is None

    def test_restore_alive_is_noop(self, customer):
        updated = customer.updated_at
        customer.restore()
        assert customer.updated_at == updated

    @freeze_time("2024-03-15 12:00:00")
    def test_delete_records_timestamp(self, customer):
        customer.delete()
        customer.refresh_from_db()
        assert customer.deleted_at == timezone.now()

    def test_deleted_order_keeps_items(self, make_order):
        order = make_order()
        order.delete()
        assert order.items.alive().count() == 1


class TestSoftDeleteQuerySet:
    def test_bulk_delete_skips_dead_rows(self):
        first, second = _customer(1), _customer(2)
        first.delete()

        count, detail = Customer.objects.filter(pk__in=[first.pk, second.pk]).delete()

        assert count == 1
        assert detail == {"customers.Customer": 1}
        second.refresh_from_db()
        assert second.is_deleted is True

    def test_manager_types(self):
        assert isinstance(Customer.objects, SoftDeleteManager)
        assert isinstance(Customer.objects.all(), SoftDeleteQuerySet)
