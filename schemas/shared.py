from pydantic import BaseModel, field_validator

ANONYMOUS_NAME = "anonymous"


class PavilionBase(BaseModel):
    name : str
    description : str = ""
    image_url : str | None = None

    class Config:
        from_attributes = True


class ReviewBase(BaseModel):
    name : str = ANONYMOUS_NAME
    comment : str
    again : bool | None = None

    # older rows may have a NULL name
    @field_validator("name", mode="before")
    @classmethod
    def missing_name_is_anonymous(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return ANONYMOUS_NAME
        return value

    class Config:
        from_attributes = True
