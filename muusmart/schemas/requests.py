from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=150, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=150, description="Username")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Password")
