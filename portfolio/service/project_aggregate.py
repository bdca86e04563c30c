# portfolio/service/project_aggregate.py
"""项目聚合：项目文档 + 内容块 + 标签关联，作为一个保存/删除的一致性边界

保存不是原子的：先整体写入项目文档，再重写标签关联（先删后插）。
关联重写失败时文档不会回滚，调用方重新保存即可收敛。
同一项目的并发保存不做协调，以最后一次写入为准。
"""
import logging
from typing import Iterable, Iterator, List, Optional

from pydantic import ValidationError as SchemaValidationError

from portfolio.schemas.block import BaseBlock, dump_blocks, duplicate_ids, parse_block
from portfolio.schemas.project import Project
from portfolio.schemas.tag import Tag
from portfolio.service.block_editor import renumber
from portfolio.service.block_renderer import DisplayUnit, render_blocks
from portfolio.service.errors import NotFound, PartialSaveError, PersistenceError, ValidationError
from portfolio.service.persistence import PortfolioStore

logger = logging.getLogger(__name__)


def load_blocks(records: Iterable[dict]) -> List[BaseBlock]:
    """按存储的 order 排序并重新编号；未知类型或损坏的块被丢弃"""
    blocks = []
    for position, record in enumerate(records or []):
        if not isinstance(record, (dict, BaseBlock)):
            logger.warning("丢弃无法识别的内容块记录 (position=%s)", position)
            continue
        try:
            block = parse_block(record)
        except SchemaValidationError:
            logger.warning("丢弃损坏的内容块 (position=%s)", position)
            continue
        if block is None:
            logger.warning("丢弃未知类型的内容块 (position=%s, type=%r)", position, record.get("type"))
            continue
        blocks.append((block.order, position, block))
    blocks.sort(key=lambda entry: entry[:2])
    return renumber(block for _, _, block in blocks)


def _unique(labels: Iterable[str]) -> List[str]:
    # 去重并保持选择顺序
    return list(dict.fromkeys(label.strip() for label in labels if label and label.strip()))


class ProjectAggregate:
    def __init__(self, store: PortfolioStore):
        self.store = store

    def _assemble(self, record: dict, tags: List[dict]) -> Project:
        return Project(
            id=record["id"],
            title=record["title"],
            thumbnail_url=record["thumbnail_url"],
            preview_video_url=record.get("preview_video_url"),
            description=load_blocks(record.get("description")),
            software_icons=list(record.get("software_icons") or []),
            order_index=record.get("order_index") or 0,
            tags=[Tag(**tag) for tag in tags],
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )

    def load(self, project_id: int) -> Project:
        record = self.store.get_project(project_id)
        if record is None:
            raise NotFound("Project", project_id)
        return self._assemble(record, self.store.get_project_tags(project_id))

    def list_projects(self) -> List[Project]:
        records = self.store.list_projects()
        tags_by_project = self.store.get_tags_for_projects([record["id"] for record in records])
        return [self._assemble(record, tags_by_project.get(record["id"], [])) for record in records]

    def save(self, project: Project, selected_tags: Optional[Iterable[int]] = None) -> int:
        """校验后整体写入项目，再重写标签关联，返回项目 id

        selected_tags 为 None 时使用 project.tags；空列表会清除全部关联。
        """
        title = (project.title or "").strip()
        thumbnail_url = (project.thumbnail_url or "").strip()
        if not title:
            raise ValidationError("title is required", field="title")
        if not thumbnail_url:
            raise ValidationError("thumbnail_url is required", field="thumbnail_url")
        duplicates = duplicate_ids(project.description)
        if duplicates:
            raise ValidationError(f"duplicate block ids: {duplicates}", field="description")

        document = {
            "title": title,
            "thumbnail_url": thumbnail_url,
            "preview_video_url": (project.preview_video_url or "").strip() or None,
            "description": dump_blocks(renumber(project.description)),
            "software_icons": _unique(project.software_icons),
            "order_index": project.order_index or 0,
        }

        if project.id is None:
            project_id = self.store.insert_project(document)
            logger.info("创建项目 id=%s title=%r", project_id, title)
        else:
            project_id = project.id
            if not self.store.replace_project(project_id, document):
                raise NotFound("Project", project_id)
            logger.info("更新项目 id=%s title=%r", project_id, title)

        if selected_tags is None:
            selected_tags = [tag.id for tag in project.tags]
        try:
            self.store.replace_project_tags(project_id, list(selected_tags))
        except PersistenceError as exc:
            raise PartialSaveError(
                f"project {project_id} saved but tag associations were not rewritten", project_id
            ) from exc
        return project_id

    def delete(self, project_id: int) -> None:
        if not self.store.delete_project(project_id):
            raise NotFound("Project", project_id)
        logger.info("删除项目 id=%s", project_id)

    def render(self, project_id: int) -> Iterator[DisplayUnit]:
        """读取项目并返回正文的展示单元序列"""
        record = self.store.get_project(project_id)
        if record is None:
            raise NotFound("Project", project_id)
        return render_blocks(record.get("description") or [], fallback_src=record.get("thumbnail_url"))
