from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime


CloudProvider = Literal["google-drive", "onedrive", "notion"]


class UrlSourceCreate(BaseModel):
    url: str
    name: Optional[str] = None

    @field_validator("url")
    @classmethod
    def check_scheme(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return value


class CloudSourceCreate(BaseModel):
    provider: CloudProvider
    file_id: str = Field(alias="fileId")
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = {"populate_by_name": True}


class DataSourceResponse(BaseModel):
    """Data source without its payload; rows are fetched through widgets."""
    id: int
    user_id: int = Field(alias="userId")
    organization_id: Optional[int] = Field(None, alias="organizationId")
    name: str
    type: str
    file_type: Optional[str] = Field(None, alias="fileType")
    source_url: Optional[str] = Field(None, alias="sourceUrl")
    # ``metadata`` on the ORM class is SQLAlchemy's MetaData
    metadata_json: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("metadata_json", "metadata"), serialization_alias="metadata"
    )
    status: str
    error_message: Optional[str] = Field(None, alias="errorMessage")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class UploadResponse(BaseModel):
    sources: List[DataSourceResponse]
    count: int


class AiAnalysisResponse(BaseModel):
    id: int
    data_source_id: int = Field(alias="dataSourceId")
    analysis_type: str = Field(alias="analysisType")
    result: Dict[str, Any]
    created_at: datetime = Field(alias="createdAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
