from typing import Optional
from pydantic import BaseModel, EmailStr, Field, UUID4
from datetime import datetime


# Properties to receive via API on creation (POST /auth/register)
class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)
    avatar_url: Optional[str] = None


# Properties to receive via API on admin creation (POST /auth/admin/register)
class AdminCreate(UserCreate):
    admin_secret: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


# Properties to receive via API on update (PATCH /me)
class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    avatar_url: Optional[str] = None


# Admin user management (PATCH /admin/users/{id})
class AdminUserUpdate(BaseModel):
    is_active: Optional[bool] = None
    is_admin: Optional[bool] = None


# Properties returned via API
class User(BaseModel):
    id: UUID4
    name: str
    email: EmailStr
    avatar_url: Optional[str] = None
    is_admin: bool
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Compact user for nested responses (host, chat participants, admin booking view)
class UserSummary(BaseModel):
    id: UUID4
    name: str
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: User


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
