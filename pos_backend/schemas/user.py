from pydantic import BaseModel, EmailStr, Field
from typing import List, Literal, Optional
from datetime import datetime


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr


# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str


# First-run admin bootstrap, gated by the configured setup key
class SetupRequest(UserBase):
    setup_key: str
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)


# Admin-created account
class UserCreate(UserBase):
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    role: Literal["admin", "user"] = "user"


# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsersPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int


# Profile kept in the server-side session
class SessionProfile(BaseModel):
    id: int
    name: str
    email: str
    role: str


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


# Schema for the login token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
