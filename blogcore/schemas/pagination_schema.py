from pydantic import BaseModel, Field

from blogcore.config import settings


class PaginationModel(BaseModel):
    page: int = Field(1, ge=1, description="1-based page number")
    size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1)


class PaginationDto(BaseModel):
    size: int
    count: int  # number of pages
    current: int
    total: int  # matching items across all pages
