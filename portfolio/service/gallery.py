# portfolio/service/gallery.py
import json
import logging
import os
import random
import tempfile
import threading
from typing import Iterable, List, Optional, Sequence

from portfolio.schemas.project import Project

logger = logging.getLogger(__name__)


def all_software(projects: Iterable[Project]) -> List[str]:
    """所有项目使用过的软件，去重后排序"""
    software = set()
    for project in projects:
        software.update(project.software_icons or [])
    return sorted(software)


def filter_projects(
    projects: Iterable[Project],
    software: Optional[str] = None,
    wishlist: Optional["Wishlist"] = None,
) -> List[Project]:
    result = list(projects)
    if software:
        result = [project for project in result if software in (project.software_icons or [])]
    if wishlist is not None:
        result = [project for project in result if wishlist.contains(project.id)]
    return result


def pick_random(projects: Sequence[Project], rng: Optional[random.Random] = None) -> Optional[Project]:
    if not projects:
        return None
    return (rng or random).choice(list(projects))


class Wishlist:
    """本地收藏夹

    显式生命周期：load() 从 JSON 文件读取，toggle() 每次修改后立即写回。
    """

    def __init__(self, path: str):
        self.path = path
        self._ids: List[int] = []
        self._lock = threading.Lock()

    def load(self) -> "Wishlist":
        if not os.path.exists(self.path):
            self._ids = []
            return self
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("wishlist file must contain a JSON array")
            self._ids = list(dict.fromkeys(data))
        except (OSError, ValueError, TypeError) as e:
            logger.error("读取收藏夹失败(path=%s): %s", self.path, e)
            self._ids = []
        return self

    def _persist(self, ids: List) -> None:
        # 先写临时文件再替换，读取方不会看到写了一半的文件
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
        ) as f:
            json.dump(ids, f)
            tmp_path = f.name
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise

    def toggle(self, project_id) -> bool:
        """切换收藏状态，返回切换后是否在收藏夹中"""
        with self._lock:
            added = project_id not in self._ids
            if added:
                ids = [*self._ids, project_id]
            else:
                ids = [item for item in self._ids if item != project_id]
            # 写入成功后才更新内存状态
            self._persist(ids)
            self._ids = ids
        return added

    def contains(self, project_id) -> bool:
        return project_id in self._ids

    @property
    def ids(self) -> List:
        return list(self._ids)

    @property
    def count(self) -> int:
        return len(self._ids)
