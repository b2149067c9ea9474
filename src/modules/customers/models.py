"""Customer master data for manufacturing orders.

Customers are mostly companies (CNPJ) but individuals (CPF) are accepted.
The document is stored digits-only and is unique across the system,
deleted customers included, since order history keeps pointing at them.
Only the last four digits of a document ever appear in ``__str__`` or logs.
"""

from __future__ import annotations

import re

import structlog
from validate_docbr import CNPJ, CPF

from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)

_DOCUMENT_VALIDATORS = {"CPF": CPF, "CNPJ": CNPJ}


def sanitize_document(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def mask_document(document: str) -> str:
    return f"***{document[-4:]}" if document else "***????"


class DocumentType(models.TextChoices):
    CPF = "CPF", "CPF"
    CNPJ = "CNPJ", "CNPJ"


class Customer(SoftDeleteModel):
    name = models.CharField(max_length=255)
    trade_name = models.CharField(max_length=255, blank=True, default="")
    document = models.CharField(max_length=14, unique=True)
    document_type = models.CharField(max_length=4, choices=DocumentType.choices)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")
    contact_name = models.CharField(max_length=255, blank=True, default="")
    address = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "customers"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    @property
    def display_name(self) -> str:
        return self.trade_name or self.name

    def clean(self) -> None:
        super().clean()
        self.document = sanitize_document(self.document)
        validator_cls = _DOCUMENT_VALIDATORS.get(self.document_type)
        if validator_cls is None:
            raise ValidationError({"document_type": "Invalid document type."})
        if not validator_cls().validate(self.document):
            logger.warning(
                "customer.invalid_document",
                document_type=self.document_type,
                document=mask_document(self.document),
            )
            raise ValidationError({"document": f"Invalid {self.document_type} number."})

    def save(self, *args, **kwargs) -> None:
        self.document = sanitize_document(self.document)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.display_name} ({self.document_type}: {mask_document(self.document)})"
