from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from .shared import ReviewBase


class ReviewCreate(BaseModel):
    name: str | None = Field(None, max_length=100)
    comment: str = Field(..., min_length=1)
    again: bool

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("comment must not be empty")
        return value

    @field_validator("name")
    @classmethod
    def blank_name_is_anonymous(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class ReviewRead(ReviewBase):
    id: int
    pavilion_id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True
