# portfolio/routers/tag.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from portfolio.models.database import get_db
from portfolio.schemas.tag import DeleteTagResponse, TagCreate, TagResponse, TagsResponse, TagUpdate
from portfolio.service.persistence import SqlAlchemyStore
from portfolio.service.tags import PRESET_COLORS, TagService
from portfolio.sse.connection_manager import manager

router = APIRouter()


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    return TagService(SqlAlchemyStore(db))


@router.get("/tags", response_model=TagsResponse)
def get_tags(service: TagService = Depends(get_tag_service)):
    """获取所有标签，最新创建的在前"""
    return TagsResponse(data=service.list())


@router.get("/tags/palette")
def get_palette():
    """标签调色板，第一个为默认颜色"""
    return {"code": 200, "data": PRESET_COLORS, "msg": "ok"}


@router.post("/tags", response_model=TagResponse)
async def create_tag(tag: TagCreate, service: TagService = Depends(get_tag_service)):
    """创建新标签"""
    new_tag = await run_in_threadpool(service.create, tag.label, tag.hex_color)
    await manager.notify("tag", "create", new_tag.id)
    return TagResponse(data=new_tag)


@router.put("/tags/{tag_id}", response_model=TagResponse)
async def update_tag(tag_id: int, tag: TagUpdate, service: TagService = Depends(get_tag_service)):
    """更新标签"""
    updated = await run_in_threadpool(service.update, tag_id, label=tag.label, hex_color=tag.hex_color)
    await manager.notify("tag", "update", tag_id)
    return TagResponse(data=updated)


@router.delete("/tags/{tag_id}", response_model=DeleteTagResponse)
async def delete_tag(tag_id: int, service: TagService = Depends(get_tag_service)):
    """删除标签；引用它的项目在读取时自动忽略"""
    await run_in_threadpool(service.delete, tag_id)
    await manager.notify("tag", "delete", tag_id)
    return DeleteTagResponse(message="Tag deleted successfully")
