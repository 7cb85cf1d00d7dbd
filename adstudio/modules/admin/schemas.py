from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime


class RoleUpdate(BaseModel):
    role: Literal["user", "admin", "superadmin"]


class AdminCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    first_name: str = Field(alias="firstName", min_length=2)
    last_name: str = Field(alias="lastName", min_length=2)
    password: str = Field(min_length=8)


class AdminAccountResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    created_at: Optional[datetime] = None


class UserProfileResponse(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    initials: Optional[str] = None
    role: str = "user"
    status: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
