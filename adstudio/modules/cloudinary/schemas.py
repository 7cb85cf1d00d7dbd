from pydantic import BaseModel, ConfigDict, Field, HttpUrl
from typing import List, Literal, Optional


class UploadAssetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: HttpUrl
    asset_type: Literal["image", "video", "content"] = Field(alias="assetType")
    file_name: Optional[str] = Field(None, alias="fileName")
    folder: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class UploadResult(BaseModel):
    public_id: str
    secure_url: str
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None
    resource_type: str = "image"


class UploadBase64Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: str = Field(pattern=r"^data:[\w.+-]+/[\w.+-]+;base64,")
    asset_type: Literal["image", "video", "content"] = Field(alias="assetType")
    file_name: Optional[str] = Field(None, alias="fileName")
    folder: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
