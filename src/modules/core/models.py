"""Abstract base models and the transactional outbox.

- ``BaseModel``: UUIDv7 primary key plus ``created_at`` / ``updated_at``.
- ``SoftDeleteModel``: ``deleted_at`` marker; production history (orders,
  items, stages) is never physically removed by the application.
- ``OutboxEvent``: domain events written in the same transaction as the
  aggregate that raised them, relayed later by ``core.publish_outbox_events``.

``objects`` on soft-deletable models is unfiltered; call ``.alive()`` to
hide deleted rows.
"""

from __future__ import annotations

import uuid6
from django.db import models
from django.utils import timezone


class BaseModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Always bump ``updated_at``, also on partial ``update_fields`` saves."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Soft delete
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=True)

    def dead(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=False)

    def delete(self) -> tuple[int, dict[str, int]]:
        now = timezone.now()
        count = self.alive().update(deleted_at=now, updated_at=now)
        return count, {self.model._meta.label: count}


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    pass


class SoftDeleteModel(BaseModel):
    deleted_at = models.DateTimeField(null=True, blank=True, default=None, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        """Mark the row as deleted (no-op when it already is)."""
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])
        return 1, {self._meta.label: 1}

    def restore(self) -> None:
        if not self.is_deleted:
            return
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pendente"
    PUBLISHED = "PUBLISHED", "Publicado"
    FAILED = "FAILED", "Falhou"


class OutboxEvent(BaseModel):
    """A domain event waiting to be relayed to subscribers.

    Rows are created by repositories inside the business transaction.
    The relay task picks ``PENDING`` (and retryable ``FAILED``) rows in
    ``created_at`` order and marks each one published or failed.
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(blank=True, default="")
    retry_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["aggregate_id"], name="outbox_aggregate_id_idx"),
            models.Index(fields=["status", "created_at"], name="outbox_status_created_idx"),
        ]

    def mark_as_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.save(update_fields=["status", "processed_at"])

    def mark_as_failed(self, error: str) -> None:
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
