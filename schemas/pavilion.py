from typing import List
from pydantic import BaseModel, Field
from .shared import PavilionBase
from .review import ReviewRead


class PavilionRead(PavilionBase):
    id: int

    class Config:
        from_attributes = True


class PavilionDetailRead(BaseModel):
    pavilion: PavilionRead
    reviews: List[ReviewRead] = Field(default_factory=list)
    summary: str
    approval_ratio: float


class SelectionRead(PavilionDetailRead):
    pass
