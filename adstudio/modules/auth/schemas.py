from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class ApiKeyCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key_value: str = Field(alias="keyValue", min_length=1)
    provider: str = Field(min_length=1)


class ApiKeyResponse(BaseModel):
    id: str
    provider: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
