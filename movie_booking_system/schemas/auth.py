"""
Authentication-related Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field

from .flow import FlowStateResponse


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class UserRegistration(BaseModel):
    """Schema for user registration."""
    name: str = Field(..., max_length=100)
    email: EmailStr
    password: str
    confirm_password: str


class SessionResponse(BaseModel):
    """Schema for a newly opened booking session."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    state: FlowStateResponse
