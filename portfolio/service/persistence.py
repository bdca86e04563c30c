# portfolio/service/persistence.py
"""持久化协作者

核心逻辑只依赖 PortfolioStore 接口，记录以普通 dict 传递。
所有存储层异常统一转换为 PersistenceError，不解析底层状态码。
"""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio.models.project import Project as ProjectModel
from portfolio.models.tag import Tag as TagModel, project_tags
from portfolio.service.errors import PersistenceError

logger = logging.getLogger(__name__)

PROJECT_FIELDS = (
    "title",
    "thumbnail_url",
    "preview_video_url",
    "description",
    "software_icons",
    "order_index",
)


class PortfolioStore(ABC):

    # 项目
    @abstractmethod
    def get_project(self, project_id: int) -> Optional[dict]: ...

    @abstractmethod
    def list_projects(self) -> List[dict]:
        """按 order_index 降序返回全部项目"""

    @abstractmethod
    def insert_project(self, document: dict) -> int: ...

    @abstractmethod
    def replace_project(self, project_id: int, document: dict) -> bool:
        """整体替换，记录不存在时返回 False"""

    @abstractmethod
    def delete_project(self, project_id: int) -> bool: ...

    # 项目-标签关联
    @abstractmethod
    def get_project_tags(self, project_id: int) -> List[dict]:
        """只返回仍然存在的标签"""

    @abstractmethod
    def get_tags_for_projects(self, project_ids: Iterable[int]) -> Dict[int, List[dict]]:
        """批量读取多个项目的标签，一次查询"""

    @abstractmethod
    def replace_project_tags(self, project_id: int, tag_ids: Iterable[int]) -> None:
        """先删除全部关联，再插入选中的标签"""

    # 标签
    @abstractmethod
    def list_tags(self) -> List[dict]: ...

    @abstractmethod
    def get_tag(self, tag_id: int) -> Optional[dict]: ...

    @abstractmethod
    def insert_tag(self, label: str, hex_color: str) -> dict: ...

    @abstractmethod
    def update_tag(self, tag_id: int, changes: Dict[str, str]) -> Optional[dict]: ...

    @abstractmethod
    def delete_tag(self, tag_id: int) -> bool: ...


def project_record(row: ProjectModel) -> dict:
    record = {"id": row.id}
    for field in PROJECT_FIELDS:
        record[field] = getattr(row, field)
    record["description"] = list(row.description or [])
    record["software_icons"] = list(row.software_icons or [])
    record["created_at"] = row.created_at
    record["updated_at"] = row.updated_at
    return record


def tag_record(row: TagModel) -> dict:
    return {
        "id": row.id,
        "label": row.label,
        "hex_color": row.hex_color,
        "created_at": row.created_at,
    }


class SqlAlchemyStore(PortfolioStore):
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s失败: %s", action, exc)
            raise PersistenceError(f"{action} failed: {exc.__class__.__name__}") from exc

    def _project_row(self, project_id: int) -> Optional[ProjectModel]:
        return self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()

    def _tag_row(self, tag_id: int) -> Optional[TagModel]:
        return self.db.query(TagModel).filter(TagModel.id == tag_id).first()

    def get_project(self, project_id):
        with self._guard("读取项目"):
            row = self._project_row(project_id)
            return project_record(row) if row else None

    def list_projects(self):
        with self._guard("读取项目列表"):
            rows = (
                self.db.query(ProjectModel)
                .order_by(ProjectModel.order_index.desc(), ProjectModel.created_at.desc(), ProjectModel.id.desc())
                .all()
            )
            return [project_record(row) for row in rows]

    def insert_project(self, document):
        with self._guard("创建项目"):
            row = ProjectModel(**{field: document[field] for field in PROJECT_FIELDS})
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return row.id

    def replace_project(self, project_id, document):
        with self._guard("更新项目"):
            row = self._project_row(project_id)
            if row is None:
                return False
            for field in PROJECT_FIELDS:
                setattr(row, field, document[field])
            self.db.commit()
            return True

    def delete_project(self, project_id):
        # 不级联删除关联行，孤立的关联由读取方忽略
        with self._guard("删除项目"):
            row = self._project_row(project_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True

    def get_project_tags(self, project_id):
        with self._guard("读取项目标签"):
            row = self._project_row(project_id)
            if row is None:
                return []
            return [tag_record(tag) for tag in row.tags]

    def get_tags_for_projects(self, project_ids):
        project_ids = list(project_ids)
        if not project_ids:
            return {}
        with self._guard("读取项目标签"):
            rows = (
                self.db.query(project_tags.c.project_id, TagModel)
                .join(TagModel, TagModel.id == project_tags.c.tag_id)
                .filter(project_tags.c.project_id.in_(project_ids))
                .order_by(project_tags.c.project_id, TagModel.id)
                .all()
            )
            result = {}
            for project_id, tag in rows:
                result.setdefault(project_id, []).append(tag_record(tag))
            return result

    def replace_project_tags(self, project_id, tag_ids):
        tag_ids = list(dict.fromkeys(tag_ids))
        with self._guard("重写项目标签关联"):
            self.db.execute(project_tags.delete().where(project_tags.c.project_id == project_id))
            if tag_ids:
                self.db.execute(
                    project_tags.insert(),
                    [{"project_id": project_id, "tag_id": tag_id} for tag_id in tag_ids],
                )
            self.db.commit()

    def list_tags(self):
        with self._guard("读取标签列表"):
            rows = self.db.query(TagModel).order_by(TagModel.created_at.desc(), TagModel.id.desc()).all()
            return [tag_record(row) for row in rows]

    def get_tag(self, tag_id):
        with self._guard("读取标签"):
            row = self._tag_row(tag_id)
            return tag_record(row) if row else None

    def insert_tag(self, label, hex_color):
        with self._guard("创建标签"):
            row = TagModel(label=label, hex_color=hex_color)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return tag_record(row)

    def update_tag(self, tag_id, changes):
        with self._guard("更新标签"):
            row = self._tag_row(tag_id)
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value)
            self.db.commit()
            self.db.refresh(row)
            return tag_record(row)

    def delete_tag(self, tag_id):
        # 被项目引用的标签同样可以删除，关联行成为悬挂引用
        with self._guard("删除标签"):
            row = self._tag_row(tag_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
            return True
