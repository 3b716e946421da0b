from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class Identity(BaseModel):
    """Caller identity extracted from the auth provider's access token"""
    user_id: str
    email: Optional[str] = None


# Schema for user response
class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    role: str
    created_at: datetime
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AdminUserSummary(BaseModel):
    """Per-user aggregates for the admin view"""
    id: str
    email: Optional[str]
    role: str
    item_count: int = 0
    session_count: int = 0
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    last_item_added_at: Optional[datetime] = None
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(BaseModel):
    success: bool = True
