# portfolio/schemas/project.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .block import ContentBlock
from .tag import Tag


class ProjectBase(BaseModel):
    title: str
    thumbnail_url: str
    preview_video_url: Optional[str] = None
    description: List[ContentBlock] = []  # 有序内容块，正文
    software_icons: List[str] = []
    order_index: int = 0


class ProjectWrite(ProjectBase):
    """创建/整体替换项目的请求体"""
    tag_ids: List[int] = []


class Project(ProjectBase):
    id: Optional[int] = None
    tags: List[Tag] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    code: int = 200
    data: List[Project]
    msg: str = "ok"


class ProjectResponse(BaseModel):
    code: int = 200
    data: Project
    msg: str = "ok"


class BlockEditRequest(BaseModel):
    """无状态编辑接口：携带当前块列表，返回新的块列表"""
    blocks: List[ContentBlock] = []
    type: Optional[str] = None  # add
    block_id: Optional[str] = None  # update / remove
    content: Optional[str] = None  # update
    sequence: Optional[List[str]] = None  # reorder，按新顺序排列的块 id


class BlockListResponse(BaseModel):
    code: int = 200
    data: List[ContentBlock]
    msg: str = "ok"


class DeleteProjectResponse(BaseModel):
    code: int = 200
    data: bool = True
    msg: str = "ok"
