from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Literal, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OpenAIGenerateRequest(BaseModel):
    prompt: str = Field(min_length=1)
    type: Literal["text", "image", "video"]
    options: Dict[str, Any] = Field(default_factory=dict)


class FormatSpecs(BaseModel):
    channel: Optional[str] = None
    format: Optional[str] = None


class HeyGenGenerateRequest(CamelModel):
    template_id: str = Field(alias="templateId")
    product_id: Optional[str] = Field(None, alias="productId")
    instruction: str = ""
    variables: Dict[str, str] = Field(default_factory=dict)
    format_specs: Optional[FormatSpecs] = Field(None, alias="formatSpecs")
    test: bool = False


class RunwayGenerateRequest(BaseModel):
    prompt: str = Field(min_length=1)
    type: Literal["image", "video"] = "video"
    options: Dict[str, Any] = Field(default_factory=dict)
