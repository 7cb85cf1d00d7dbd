from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from datetime import datetime

SettingCategory = Literal["general", "security", "upload", "email", "system"]


class SettingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(min_length=1)
    value: str = Field(min_length=1)
    description: Optional[str] = None
    category: SettingCategory = "general"
    is_public: bool = Field(False, alias="isPublic")


class SettingUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[SettingCategory] = None
    is_public: Optional[bool] = Field(None, alias="isPublic")


class SettingResponse(BaseModel):
    id: str
    key: str
    value: str
    description: Optional[str] = None
    category: str
    is_public: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
