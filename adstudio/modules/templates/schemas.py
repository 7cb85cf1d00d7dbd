from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from typing import Optional, Dict, Any, List, Literal, Union
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TemplateVariable(CamelModel):
    name: str
    type: str = "text"
    char_limit: int = Field(100, alias="charLimit")
    required: bool = True
    description: str = ""


class TemplateDetail(CamelModel):
    id: str
    name: str
    description: str
    thumbnail: Optional[str] = None
    category: str = "Custom"
    duration: str = "30s"
    aspect_ratio: str = Field("landscape", alias="aspectRatio")
    variables: List[str] = Field(default_factory=list)
    variable_types: Dict[str, TemplateVariable] = Field(default_factory=dict, alias="variableTypes")
    source: Literal["database", "api", "fallback"] = "api"


class TemplateSummary(CamelModel):
    id: str
    name: str
    description: str
    thumbnail: Optional[str] = None
    category: str = "Custom"
    duration: str = "30s"
    status: str = "active"
    heygen_template_id: str = Field(alias="heygenTemplateId")
    variables: Any = Field(default_factory=list)


class ClientTemplateConfig(CamelModel):
    client_id: str = Field(alias="clientId")
    assigned_template_ids: List[str] = Field(default_factory=list, alias="assignedTemplateIds")
    fallback_variables: Dict[str, List[str]] = Field(default_factory=dict, alias="fallbackVariables")


class AccessVariableIn(CamelModel):
    name: str = Field(min_length=1)
    type: Literal["text", "image", "number"]
    required: bool = True
    default_value: Optional[str] = Field(None, alias="defaultValue")


class AssignTemplateRequest(CamelModel):
    user_id: str = Field(alias="userId", min_length=1)
    template_id: str = Field(alias="templateId", min_length=1)
    template_name: str = Field(alias="templateName", min_length=1)
    template_description: Optional[str] = Field(None, alias="templateDescription")
    thumbnail_url: Optional[HttpUrl] = Field(None, alias="thumbnailUrl")
    category: Optional[str] = None
    aspect_ratio: Optional[str] = Field(None, alias="aspectRatio")
    variables: Optional[List[AccessVariableIn]] = None
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")


class RevokeTemplateRequest(CamelModel):
    user_id: str = Field(alias="userId", min_length=1)
    template_id: str = Field(alias="templateId", min_length=1)
    source_system: str = Field("heygen", alias="sourceSystem")


class UpdateTemplateRequest(CamelModel):
    template_name: Optional[str] = Field(None, alias="templateName")
    template_description: Optional[str] = Field(None, alias="templateDescription")
    thumbnail_url: Optional[HttpUrl] = Field(None, alias="thumbnailUrl")
    category: Optional[str] = None
    aspect_ratio: Optional[str] = Field(None, alias="aspectRatio")
    variables: Optional[List[AccessVariableIn]] = None
    can_use: Optional[bool] = Field(None, alias="canUse")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")


class TemplateAccessCreate(BaseModel):
    user_id: str
    source_system: str = "heygen"
    external_id: str
    template_name: str
    template_description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    category: Optional[str] = None
    aspect_ratio: Optional[str] = None
    expires_at: Optional[datetime] = None


class TemplateAccessResponse(BaseModel):
    id: str
    user_id: str
    source_system: str
    external_id: str
    template_name: str
    template_description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    category: Optional[str] = None
    aspect_ratio: Optional[str] = None
    can_use: bool = True
    usage_count: int = 0
    last_used_at: Optional[datetime] = None
    selected_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    variables: List[Dict[str, Any]] = Field(default_factory=list)


class ClientConfigCreate(CamelModel):
    client_id: str = Field(alias="clientId", min_length=1)
    client_name: str = Field(alias="clientName", min_length=1)


class AssignmentCreate(CamelModel):
    template_id: str = Field(alias="templateId", min_length=1)
    template_name: Optional[str] = Field(None, alias="templateName")
    is_active: bool = Field(True, alias="isActive")


class FallbackVariableIn(CamelModel):
    name: str = Field(min_length=1)


class FallbackVariablesRequest(CamelModel):
    template_id: str = Field(alias="templateId", min_length=1)
    variables: List[Union[str, FallbackVariableIn]] = Field(min_length=1)

    @field_validator("variables")
    @classmethod
    def names_not_blank(cls, value):
        for item in value:
            name = item if isinstance(item, str) else item.name
            if not name.strip():
                raise ValueError("variable names must not be blank")
        return value

    def variable_names(self) -> List[str]:
        return [v.strip() if isinstance(v, str) else v.name.strip() for v in self.variables]
