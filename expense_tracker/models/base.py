from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    """Request body: camelCase on the wire, unknown fields rejected"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class ResponseModel(BaseModel):
    """Response body built from ORM objects, serialized in camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
