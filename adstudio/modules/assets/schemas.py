from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from typing import Optional, List, Literal

AssetType = Literal["image", "video", "content"]
SourceSystem = Literal["openai", "runway", "heygen"]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AssetCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    asset_type: AssetType = Field(alias="assetType")
    asset_url: HttpUrl = Field(alias="assetUrl")
    gif_url: Optional[HttpUrl] = Field(None, alias="gifUrl")
    content: Optional[str] = None
    instruction: str = Field(min_length=1)
    source_system: SourceSystem = Field(alias="sourceSystem")
    favorited: bool = False
    original_asset_id: Optional[str] = Field(None, alias="originalAssetId")


class AssetUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    asset_type: Optional[AssetType] = Field(None, alias="assetType")
    asset_url: Optional[HttpUrl] = Field(None, alias="assetUrl")
    gif_url: Optional[HttpUrl] = Field(None, alias="gifUrl")
    content: Optional[str] = None
    instruction: Optional[str] = Field(None, min_length=1)
    source_system: Optional[SourceSystem] = Field(None, alias="sourceSystem")
    favorited: Optional[bool] = None
    original_asset_id: Optional[str] = Field(None, alias="originalAssetId")


class GeneratedAssetCreate(CamelModel):
    inventory_id: Optional[str] = Field(None, alias="inventoryId")
    channel: Optional[str] = None
    format: Optional[str] = None
    source_system: SourceSystem = Field(alias="sourceSystem")
    asset_type: AssetType = Field(alias="assetType")
    url: str = Field(min_length=1)
    instruction: Optional[str] = None
    approved: bool = False


class ApprovalUpdate(BaseModel):
    approved: bool
