"""SQLAlchemy models for the product catalog.

Defines the categories and products tables.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_api.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryModel(Base):
    """Category row.

    Attributes:
        id: Category ID.
        name: Display name.
        parent_id: Parent category ID (None for root). Not a foreign key:
            dangling parents are tolerated on read.
        sort_order: Position among siblings.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CategoryModel(id={self.id}, name={self.name}, parent_id={self.parent_id})>"


class ProductModel(Base):
    """Product row.

    Attributes:
        id: Product ID.
        sku: Stock keeping unit (unique when set).
        name: Product name.
        ean13: EAN-13 barcode.
        price: Price; NULL or non-positive means "price pending".
        description: Product description.
        image_urls: JSON text of ``[{"url", "size"}]``.
        category_id: Owning category.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    ean13: Mapped[str | None] = mapped_column(String(13), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_urls: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    category_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, sku={self.sku}, name={self.name[:30]}...)>"
