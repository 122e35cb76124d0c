from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from blogcore.schemas.pagination_schema import PaginationDto
from blogcore.schemas.tag_schema import TagDto


class PostSorting(str, Enum):
    CREATE_DESC = "CreateDesc"
    CREATE_ASC = "CreateAsc"
    LIKE_ASC = "LikeAsc"
    LIKE_DESC = "LikeDesc"


class PostListFilter(BaseModel):
    author: Optional[str] = None  # substring of the author's full name
    min_reading_time: Optional[int] = Field(None, ge=0)
    max_reading_time: Optional[int] = Field(None, ge=0)
    community_id: Optional[UUID] = None
    only_my_communities: bool = False
    tag_ids: List[UUID] = []


class CreatePostModel(BaseModel):
    title: str = Field(..., min_length=1, max_length=1000)
    description: str = Field(..., min_length=1)
    reading_time: int = Field(..., ge=0)
    image: Optional[str] = None
    address_id: Optional[UUID] = None
    tags: List[UUID] = []


class PostDto(BaseModel):
    id: UUID
    create_time: datetime
    title: str
    description: str
    reading_time: int
    image: Optional[str]
    author_id: UUID
    author: str
    community_id: Optional[UUID]
    community_name: Optional[str]
    likes: int
    has_like: bool
    comments_count: int
    tags: List[TagDto]


class PostPagedListDto(BaseModel):
    posts: List[PostDto]
    pagination: PaginationDto
