# portfolio/routers/project.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from portfolio.models.database import get_db
from portfolio.routers.wishlist import get_wishlist
from portfolio.schemas.block import BlockType, duplicate_ids
from portfolio.schemas.project import (
    BlockEditRequest,
    BlockListResponse,
    DeleteProjectResponse,
    Project,
    ProjectListResponse,
    ProjectResponse,
    ProjectWrite,
)
from portfolio.service import block_editor
from portfolio.service.block_renderer import unit_to_dict
from portfolio.service.errors import ValidationError
from portfolio.service.gallery import Wishlist, all_software, filter_projects, pick_random
from portfolio.service.persistence import SqlAlchemyStore
from portfolio.service.project_aggregate import ProjectAggregate
from portfolio.sse.connection_manager import manager

router = APIRouter()


def get_aggregate(db: Session = Depends(get_db)) -> ProjectAggregate:
    return ProjectAggregate(SqlAlchemyStore(db))


def _to_project(payload: ProjectWrite, project_id: Optional[int] = None) -> Project:
    data = payload.model_dump(exclude={"tag_ids"})
    data["id"] = project_id
    return Project.model_validate(data)


@router.get("/projects/list", response_model=ProjectListResponse)
def list_projects(
    software: Optional[str] = Query(default=None, description="按软件筛选"),
    wishlist_only: bool = Query(default=False, description="只显示收藏的项目"),
    aggregate: ProjectAggregate = Depends(get_aggregate),
    wishlist: Wishlist = Depends(get_wishlist),
):
    """画廊列表，按 order_index 降序"""
    projects = filter_projects(
        aggregate.list_projects(),
        software=software,
        wishlist=wishlist if wishlist_only else None,
    )
    return ProjectListResponse(data=projects)


@router.get("/projects/software")
def list_software(aggregate: ProjectAggregate = Depends(get_aggregate)):
    return {"code": 200, "data": all_software(aggregate.list_projects()), "msg": "ok"}


@router.get("/projects/shuffle", response_model=ProjectResponse)
def shuffle_project(
    software: Optional[str] = Query(default=None),
    aggregate: ProjectAggregate = Depends(get_aggregate),
):
    """随机挑选一个项目"""
    project = pick_random(filter_projects(aggregate.list_projects(), software=software))
    if project is None:
        raise HTTPException(status_code=404, detail="No projects to pick from")
    return ProjectResponse(data=project)


@router.post("/projects/blocks/{action}", response_model=BlockListResponse)
def edit_blocks(action: str, request: BlockEditRequest):
    """内容块编辑：add / update / remove / reorder，不落库"""
    blocks = request.blocks
    duplicates = duplicate_ids(blocks)
    if duplicates:
        raise ValidationError(f"duplicate block ids: {duplicates}", field="blocks")
    if action == "add":
        try:
            block_type = BlockType(request.type)
        except ValueError:
            raise ValidationError(f"unknown block type: {request.type!r}", field="type")
        blocks = block_editor.add_block(blocks, block_type)
    elif action == "update":
        if request.block_id is None or request.content is None:
            raise ValidationError("block_id and content are required", field="block_id")
        blocks = block_editor.update_content(blocks, request.block_id, request.content)
    elif action == "remove":
        if request.block_id is None:
            raise ValidationError("block_id is required", field="block_id")
        blocks = block_editor.remove_block(blocks, request.block_id)
    elif action == "reorder":
        if request.sequence is None:
            raise ValidationError("sequence is required", field="sequence")
        blocks = block_editor.reorder(blocks, request.sequence)
    else:
        raise HTTPException(status_code=404, detail=f"Unknown block action: {action}")
    return BlockListResponse(data=blocks)


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(project_id: int, aggregate: ProjectAggregate = Depends(get_aggregate)):
    return ProjectResponse(data=aggregate.load(project_id))


@router.get("/projects/{project_id}/render")
def render_project(project_id: int, aggregate: ProjectAggregate = Depends(get_aggregate)):
    """正文内容块的展示单元"""
    units = [unit_to_dict(unit) for unit in aggregate.render(project_id)]
    return {"code": 200, "data": units, "msg": "ok"}


@router.post("/projects", response_model=ProjectResponse)
async def create_project(payload: ProjectWrite, aggregate: ProjectAggregate = Depends(get_aggregate)):
    # 同步的数据库操作放到线程池，避免阻塞事件循环
    project_id = await run_in_threadpool(aggregate.save, _to_project(payload), payload.tag_ids)

    # 发送通知
    await manager.notify("project", "create", project_id)
    return ProjectResponse(data=await run_in_threadpool(aggregate.load, project_id))


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    payload: ProjectWrite,
    aggregate: ProjectAggregate = Depends(get_aggregate),
):
    """整体替换项目文档与标签关联"""
    await run_in_threadpool(aggregate.save, _to_project(payload, project_id), payload.tag_ids)

    await manager.notify("project", "update", project_id)
    return ProjectResponse(data=await run_in_threadpool(aggregate.load, project_id))


@router.delete("/projects/{project_id}", response_model=DeleteProjectResponse)
async def delete_project(project_id: int, aggregate: ProjectAggregate = Depends(get_aggregate)):
    await run_in_threadpool(aggregate.delete, project_id)

    await manager.notify("project", "delete", project_id)
    return DeleteProjectResponse()
