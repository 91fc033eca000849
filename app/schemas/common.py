from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request bodies use camelCase on the wire (oldPassword, fullName)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
