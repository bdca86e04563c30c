# portfolio/service/block_renderer.py
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from pydantic import ValidationError as SchemaValidationError

from portfolio.schemas.block import AudioBlock, BaseBlock, ImageBlock, TextBlock, VideoBlock, parse_block

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextUnit:
    block_id: str
    text: str  # 原样输出，保留换行
    kind: str = "text"


@dataclass(frozen=True)
class ImageUnit:
    block_id: str
    src: str
    hide_on_error: bool = True  # 图片无法加载时隐藏，而不是报错
    kind: str = "image"


@dataclass(frozen=True)
class VideoUnit:
    block_id: str
    src: str
    controls: bool = True
    fallback_src: Optional[str] = None  # 仅当 src 为空时使用
    kind: str = "video"


@dataclass(frozen=True)
class AudioUnit:
    block_id: str
    src: str
    controls: bool = True
    kind: str = "audio"


DisplayUnit = Union[TextUnit, ImageUnit, VideoUnit, AudioUnit]


def _render_block(block: BaseBlock, fallback_src: Optional[str]) -> DisplayUnit:
    if isinstance(block, TextBlock):
        return TextUnit(block_id=block.id, text=block.content)
    if isinstance(block, ImageBlock):
        return ImageUnit(block_id=block.id, src=block.content)
    if isinstance(block, VideoBlock):
        return VideoUnit(
            block_id=block.id,
            src=block.content,
            fallback_src=fallback_src if not block.content else None,
        )
    if isinstance(block, AudioBlock):
        return AudioUnit(block_id=block.id, src=block.content)
    raise TypeError(f"unhandled block kind: {type(block).__name__}")


def render_blocks(
    blocks: Iterable[Union[BaseBlock, Mapping[str, Any]]],
    fallback_src: Optional[str] = None,
) -> Iterator[DisplayUnit]:
    """将内容块按 order 映射为展示单元

    惰性生成，每次调用都从头开始，不保留任何渲染状态。
    未知类型或结构损坏的记录会被跳过，读取路径永不失败。
    """
    parsed = []
    for position, item in enumerate(blocks):
        if not isinstance(item, (BaseBlock, Mapping)):
            logger.warning("跳过无法识别的内容块记录 (position=%s)", position)
            continue
        try:
            block = parse_block(item)
        except SchemaValidationError as exc:
            logger.warning("跳过损坏的内容块 (position=%s): %s", position, exc.errors())
            continue
        if block is None:
            logger.debug("跳过未知类型的内容块 (position=%s, type=%r)", position, item.get("type"))
            continue
        parsed.append((block.order, position, block))

    for _, _, block in sorted(parsed, key=lambda entry: entry[:2]):
        yield _render_block(block, fallback_src)


def unit_to_dict(unit: DisplayUnit) -> dict:
    return dataclasses.asdict(unit)
