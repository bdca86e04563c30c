# portfolio/service/block_editor.py
"""内容块编辑操作

所有操作都是纯函数：接收当前块列表，返回新的列表，不修改输入，不持有状态。
持久化由 ProjectAggregate 显式完成。
"""
import uuid
from typing import Iterable, List, Sequence, Union

from portfolio.schemas.block import BaseBlock, BlockType, duplicate_ids, make_block


class BlockSequenceMismatch(ValueError):
    """重排序列与当前集合的 id 不一致"""


def new_block_id() -> str:
    return uuid.uuid4().hex


def renumber(blocks: Iterable[BaseBlock]) -> List[BaseBlock]:
    """按迭代顺序重新计算 order，保证从 0 开始连续"""
    result = []
    for index, block in enumerate(blocks):
        result.append(block if block.order == index else block.model_copy(update={"order": index}))
    return result


def add_block(blocks: Sequence[BaseBlock], block_type: Union[BlockType, str]) -> List[BaseBlock]:
    """在末尾追加一个空内容块，已有块的 order 不变"""
    existing = {block.id for block in blocks}
    block_id = new_block_id()
    while block_id in existing:
        block_id = new_block_id()
    return [*blocks, make_block(block_type, block_id, content="", order=len(blocks))]


def update_content(blocks: Sequence[BaseBlock], block_id: str, content: str) -> List[BaseBlock]:
    return [
        block.model_copy(update={"content": content}) if block.id == block_id else block
        for block in blocks
    ]


def remove_block(blocks: Sequence[BaseBlock], block_id: str) -> List[BaseBlock]:
    return renumber(block for block in blocks if block.id != block_id)


def reorder(
    blocks: Sequence[BaseBlock],
    new_sequence: Sequence[Union[BaseBlock, str]],
) -> List[BaseBlock]:
    """按给定顺序排列现有块

    new_sequence 可以是块对象，也可以是块 id；必须恰好包含当前集合的全部 id，
    否则抛出 BlockSequenceMismatch。块内容始终取自当前集合。
    """
    ids = [item.id if isinstance(item, BaseBlock) else item for item in new_sequence]
    by_id = {block.id: block for block in blocks}

    if len(by_id) != len(blocks):
        raise BlockSequenceMismatch(f"blocks contain duplicate ids: {duplicate_ids(blocks)}")
    if len(ids) != len(set(ids)):
        raise BlockSequenceMismatch("reorder sequence contains duplicate block ids")
    if set(ids) != set(by_id):
        missing = sorted(set(by_id) - set(ids))
        extra = sorted(set(ids) - set(by_id))
        raise BlockSequenceMismatch(f"reorder sequence does not match blocks (missing={missing}, unknown={extra})")

    return renumber(by_id[block_id] for block_id in ids)
