from datetime import datetime

from database import Base
from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Pavilion(Base):
    __tablename__ = "pavilions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(String(2048))

    reviews: Mapped[list["Review"]] = relationship("Review", back_populates="pavilion")


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    pavilion_id: Mapped[int] = mapped_column(ForeignKey("pavilions.id"), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100))
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    # nullable for rows written before the flag became mandatory
    again: Mapped[bool | None] = mapped_column(Boolean)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    pavilion: Mapped["Pavilion"] = relationship("Pavilion", back_populates="reviews")

    __table_args__ = (
        CheckConstraint("char_length(comment) > 0", name="ck_reviews_comment_not_empty"),
        Index("ix_reviews_pavilion_created", "pavilion_id", "created_at"),
    )
