# portfolio/service/tags.py
import logging
import re
from typing import List, Optional

from portfolio.schemas.tag import Tag
from portfolio.service.errors import NotFound, ValidationError
from portfolio.service.persistence import PortfolioStore

logger = logging.getLogger(__name__)

# 管理后台提供的调色板，第一个为默认颜色；数据层不限制必须取自调色板
PRESET_COLORS = [
    "#e74c3c", "#3498db", "#2ecc71", "#f39c12", "#9b59b6",
    "#1abc9c", "#e67e22", "#95a5a6", "#34495e", "#16a085",
]

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def clean_label(label: Optional[str]) -> str:
    label = (label or "").strip()
    if not label:
        raise ValidationError("label is required", field="label")
    return label


def clean_color(hex_color: Optional[str]) -> str:
    hex_color = (hex_color or "").strip()
    if not HEX_COLOR_RE.match(hex_color):
        raise ValidationError(f"invalid hex color: {hex_color!r}", field="hex_color")
    return hex_color


class TagService:
    def __init__(self, store: PortfolioStore):
        self.store = store

    def list(self) -> List[Tag]:
        """按创建时间倒序"""
        return [Tag(**record) for record in self.store.list_tags()]

    def get(self, tag_id: int) -> Tag:
        record = self.store.get_tag(tag_id)
        if record is None:
            raise NotFound("Tag", tag_id)
        return Tag(**record)

    def create(self, label: str, hex_color: Optional[str] = None) -> Tag:
        label = clean_label(label)
        hex_color = clean_color(hex_color if hex_color is not None else PRESET_COLORS[0])
        tag = Tag(**self.store.insert_tag(label, hex_color))
        logger.info("创建标签 id=%s label=%r", tag.id, tag.label)
        return tag

    def update(self, tag_id: int, label: Optional[str] = None, hex_color: Optional[str] = None) -> Tag:
        changes = {}
        if label is not None:
            changes["label"] = clean_label(label)
        if hex_color is not None:
            changes["hex_color"] = clean_color(hex_color)
        if not changes:
            return self.get(tag_id)
        record = self.store.update_tag(tag_id, changes)
        if record is None:
            raise NotFound("Tag", tag_id)
        return Tag(**record)

    def delete(self, tag_id: int) -> None:
        # 不检查引用，项目上的关联在读取时自动过滤
        if not self.store.delete_tag(tag_id):
            raise NotFound("Tag", tag_id)
        logger.info("删除标签 id=%s", tag_id)
