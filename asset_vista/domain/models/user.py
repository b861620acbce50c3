"""Identity domain — principals, sessions, role rows and profiles."""

import enum
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Role(str, enum.Enum):
    """Roles stored in the user_roles table."""
    ADMIN = "admin"
    USER = "user"


class Identity(BaseModel):
    """An authenticated principal as reported by the auth provider."""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}


class AuthSession(BaseModel):
    """Tokens issued by the auth provider. Only the provider refreshes them."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    user: Identity

    model_config = {"extra": "ignore"}


class RoleAssignment(BaseModel):
    """Row of user_roles."""
    user_id: str
    role: Role

    model_config = {"extra": "ignore"}


class Profile(BaseModel):
    """Row of profiles."""
    id: str
    username: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
