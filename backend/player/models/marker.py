"""Marker model — tag-like annotations on items."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from player.models.base import Base


class MarkerRecord(Base):
    __tablename__ = "markers"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    item_id: Mapped[str] = mapped_column(
        String, ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<MarkerRecord(item_id={self.item_id}, kind='{self.kind}')>"
