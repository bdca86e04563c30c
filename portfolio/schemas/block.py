# portfolio/schemas/block.py
"""内容块模型

项目详情页的正文由一组有序、类型各异的内容块组成：
- text:  content 为原样文本，保留空白与换行，不解析任何标记
- image / video / audio: content 为 URL，不校验可达性与 MIME 类型

块是不可变的，类型在创建后不能修改；改变媒体类型需要删除后重新创建。
"""
from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class BlockType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class BaseBlock(BaseModel):
    id: str = Field(min_length=1)
    content: str = ""
    order: int = Field(default=0, ge=0)

    class Config:
        frozen = True


class TextBlock(BaseBlock):
    type: Literal["text"] = "text"


class ImageBlock(BaseBlock):
    type: Literal["image"] = "image"


class VideoBlock(BaseBlock):
    type: Literal["video"] = "video"


class AudioBlock(BaseBlock):
    type: Literal["audio"] = "audio"


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, VideoBlock, AudioBlock],
    Field(discriminator="type"),
]

BLOCK_CLASSES = {
    BlockType.TEXT: TextBlock,
    BlockType.IMAGE: ImageBlock,
    BlockType.VIDEO: VideoBlock,
    BlockType.AUDIO: AudioBlock,
}

_block_adapter = TypeAdapter(ContentBlock)


def make_block(block_type, block_id: str, content: str = "", order: int = 0):
    """按类型创建内容块，未知类型抛出 ValueError"""
    cls = BLOCK_CLASSES[BlockType(block_type)]
    return cls(id=block_id, content=content, order=order)


def parse_block(record: Union[BaseBlock, Mapping[str, Any]]) -> Optional[BaseBlock]:
    """解析一条持久化的内容块记录

    类型不在已知范围内时返回 None（可能是新版本编辑器写入的数据），
    其他结构错误抛出 pydantic.ValidationError。
    """
    if isinstance(record, BaseBlock):
        return record
    block_type = record.get("type")
    if not isinstance(block_type, str) or block_type not in {t.value for t in BlockType}:
        return None
    return _block_adapter.validate_python(dict(record))


def dump_blocks(blocks: Iterable[BaseBlock]) -> List[dict]:
    return [block.model_dump() for block in blocks]


def duplicate_ids(blocks: Iterable[BaseBlock]) -> List[str]:
    """返回重复出现的块 id，按首次重复的顺序"""
    seen = set()
    duplicates = []
    for block in blocks:
        if block.id in seen and block.id not in duplicates:
            duplicates.append(block.id)
        seen.add(block.id)
    return duplicates


def ensure_dense_order(blocks: List[BaseBlock]) -> None:
    """检查 blocks[i].order == i 且 id 唯一"""
    seen = set()
    for index, block in enumerate(blocks):
        if block.order != index:
            raise ValueError(f"block {block.id!r} has order {block.order}, expected {index}")
        if block.id in seen:
            raise ValueError(f"duplicate block id {block.id!r}")
        seen.add(block.id)
