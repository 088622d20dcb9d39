"""
Common schema pieces shared by every request/response model.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model with camelCase JSON keys.

    - alias_generator=to_camel: `created_at` is sent as `createdAt`
    - populate_by_name=True: input may use either spelling
    - from_attributes=True: ORM objects can be returned directly
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkResponse(BaseModel):
    """Response for endpoints that only acknowledge, e.g. {"ok": true}."""
    ok: bool = True
