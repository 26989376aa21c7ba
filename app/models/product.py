# app/models/product.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog item.

    Columns:
      - id, name, brand, category, price, description,
        created_at, image_file_name

    `image_file_name` is the storage name of the product image inside
    the image directory (see app.core.storage_utils), not a URL.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Auto-increment id assigned on first save",
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the product",
    )

    brand: str = Field(max_length=100)

    category: str = Field(max_length=100, index=True)

    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=10,
        decimal_places=2,
    )

    description: str = Field(default="")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC), never updated",
    )

    image_file_name: str | None = Field(
        default=None,
        max_length=255,
        description="Stored image file name, e.g. 1700000000000_shoe.png",
    )
