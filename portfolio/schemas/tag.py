# portfolio/schemas/tag.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class TagCreate(BaseModel):
    label: str
    hex_color: Optional[str] = None  # 为空时使用调色板第一个颜色


class TagUpdate(BaseModel):
    label: Optional[str] = None
    hex_color: Optional[str] = None


class Tag(BaseModel):
    id: int
    label: str
    hex_color: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TagsResponse(BaseModel):
    code: int = 200
    data: List[Tag]
    msg: str = "ok"


class TagResponse(BaseModel):
    code: int = 200
    data: Tag
    msg: str = "ok"


class DeleteTagResponse(BaseModel):
    code: int = 200
    message: str
