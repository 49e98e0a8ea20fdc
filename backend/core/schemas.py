"""Shared pydantic base for request / response bodies."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """
    JSON bodies use camelCase (``fullName``, ``categoryIds`` …) while Python
    code uses snake_case.  Either spelling is accepted on input.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class MessageResponse(APIModel):
    message: str
