# app/schemas/product.py
from dataclasses import dataclass
from decimal import Decimal

from pydantic import ConfigDict, ValidationError, field_validator
from sqlmodel import SQLModel, Field


class ProductForm(SQLModel):
    """
    Submitted product form fields (create and edit).

    Never persisted directly; the service copies the values onto a
    Product row.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    brand: str = Field(max_length=100)
    category: str = Field(max_length=100)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    description: str = Field(default="", max_length=2000)

    @field_validator("name", "brand", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


@dataclass(frozen=True)
class ImageUpload:
    """Raw uploaded image: the uploader's file name plus its bytes."""

    filename: str | None
    content: bytes

    @property
    def is_empty(self) -> bool:
        return not self.content


def field_errors(exc: ValidationError) -> dict[str, str]:
    """
    Flatten a pydantic ValidationError into {field: first message}.

    Used by the HTML forms to show one message under each input.
    """
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__all__",)
        errors.setdefault(str(loc[0]), err["msg"])
    return errors
