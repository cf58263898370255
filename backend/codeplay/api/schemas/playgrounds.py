from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import CamelModel, PaginationResponse


class CreatePlaygroundRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    template: Optional[str] = None


class UpdatePlaygroundRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    template: Optional[str] = None


class ClonePlaygroundRequest(CamelModel):
    title: Optional[str] = None


class SavePlaygroundFilesRequest(CamelModel):
    content: Dict[str, Any]


class TemplateFilesResponse(CamelModel):
    id: str
    playground_id: str
    content: Dict[str, Any] = Field(default_factory=dict)


class PlaygroundSummaryResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    template: str
    created_at: datetime
    updated_at: datetime


class PlaygroundResponse(PlaygroundSummaryResponse):
    user_id: str
    template_files: Optional[TemplateFilesResponse] = None
    is_starred: Optional[bool] = None


class PlaygroundListResponse(CamelModel):
    data: List[PlaygroundSummaryResponse]
    pagination: PaginationResponse


class StarResponse(CamelModel):
    is_starred: bool


class TemplateResponse(CamelModel):
    name: str
    label: str
    description: str
    entry_file: str
