"""Customer DTOs (Pydantic v2, immutable).

- ``CreateCustomerDTO``: validated creation input (document checked with
  *validate-docbr*).
- ``UpdateCustomerDTO``: partial update; ``None`` means "leave unchanged".
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from validate_docbr import CNPJ, CPF


class DocumentTypeEnum(StrEnum):
    CPF = "CPF"
    CNPJ = "CNPJ"


class CreateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    document: str
    document_type: DocumentTypeEnum
    email: EmailStr
    trade_name: str = ""
    phone: str = ""
    contact_name: str = ""
    address: str = ""

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be blank.")
        return v.strip()

    @field_validator("document", mode="before")
    @classmethod
    def sanitize_document(cls, v: str) -> str:
        """Accept formatted (``12.345.678/0001-95``) or raw documents."""
        if not isinstance(v, str):
            return v
        return re.sub(r"\D", "", v)

    @model_validator(mode="after")
    def validate_document(self) -> Self:
        validator = CPF() if self.document_type == DocumentTypeEnum.CPF else CNPJ()
        if not validator.validate(self.document):
            raise ValueError(f"Invalid {self.document_type} number.")
        return self


class UpdateCustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    trade_name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    contact_name: str | None = None
    address: str | None = None
    is_active: bool | None = None
