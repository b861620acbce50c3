"""Pydantic schemas for sessions, accounts and user management."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from asset_vista.domain.models.user import Role


class SignUpRequest(BaseModel):
    email: str
    password: str
    confirm_password: Optional[str] = None
    full_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


class IdentityRead(BaseModel):
    id: str
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    identity: Optional[IdentityRead] = None
    is_admin: bool = False
    destination: Optional[str] = None
    error: Optional[str] = None
    warnings: List[str] = []


class SessionRead(BaseModel):
    identity: Optional[IdentityRead] = None
    state: str
    is_loading: bool
    is_admin: bool


class RegisterUserRequest(BaseModel):
    email: str
    password: str
    role: Role = Role.USER
    full_name: Optional[str] = None


class UserWithRole(BaseModel):
    id: str
    email: str
    created_at: Optional[datetime] = None
    role: Role
    username: Optional[str] = None
