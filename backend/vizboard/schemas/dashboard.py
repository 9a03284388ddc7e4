from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Dict, Any
from datetime import datetime
from vizboard.schemas.widget import WidgetResponse


class DashboardBase(BaseModel):
    title: str
    description: Optional[str] = None
    is_public: bool = Field(False, alias="isPublic")
    organization_id: Optional[int] = Field(None, alias="organizationId")
    layout: Optional[Dict[str, Any]] = Field(None, description="Grid layout preferences")
    theme: str = "default"

    model_config = {"populate_by_name": True}


class DashboardCreate(DashboardBase):
    pass


class DashboardUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = Field(None, alias="isPublic")
    layout: Optional[Dict[str, Any]] = None
    theme: Optional[str] = None

    model_config = {"populate_by_name": True}


class DashboardSummary(BaseModel):
    id: int
    user_id: int = Field(alias="userId")
    organization_id: Optional[int] = Field(None, alias="organizationId")
    title: str
    description: Optional[str] = None
    is_public: bool = Field(False, alias="isPublic")
    share_token: Optional[str] = Field(None, alias="shareToken")
    theme: Optional[str] = "default"
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}

    @model_validator(mode="after")
    def hide_private_token(self):
        # A kept token is only handed out while the dashboard is public
        if not self.is_public:
            self.share_token = None
        return self


class DashboardResponse(DashboardSummary):
    layout: Optional[Dict[str, Any]] = None
    widgets: List[WidgetResponse] = []
