"""User and presence schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserStatusUpdate(BaseModel):
    """Body of the mark-online request."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
