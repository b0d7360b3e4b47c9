from enum import Enum
from typing import List
from pydantic import BaseModel, Field
from .pavilion import PavilionRead


class Presentation(str, Enum):
    list = "list"
    block = "block"


class Order(str, Enum):
    default = "default"
    rating = "rating"


class CatalogItem(PavilionRead):
    summary: str
    approval_ratio: float


class CatalogRead(BaseModel):
    presentation: Presentation
    order: Order
    items: List[CatalogItem] = Field(default_factory=list)
