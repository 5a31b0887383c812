from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_service.db.base import Base


class Item(Base):
    """SQLAlchemy model for an inventory item."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text())
    photo: Mapped[str | None] = mapped_column(String(255))
