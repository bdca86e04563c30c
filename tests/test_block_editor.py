"""
内容块编辑操作测试
"""
import random

import pytest
from pydantic import ValidationError

from portfolio.schemas.block import (
    AudioBlock,
    BlockType,
    ImageBlock,
    TextBlock,
    VideoBlock,
    duplicate_ids,
    ensure_dense_order,
)
from portfolio.service.block_editor import (
    BlockSequenceMismatch,
    add_block,
    remove_block,
    renumber,
    reorder,
    update_content,
)


@pytest.fixture
def two_blocks():
    return [
        TextBlock(id="a", content="hello", order=0),
        ImageBlock(id="b", content="https://example.com/b.png", order=1),
    ]


class TestAddBlock:

    def test_appends_empty_block(self, two_blocks):
        result = add_block(two_blocks, "video")

        assert len(result) == 3
        assert result[:2] == two_blocks
        assert isinstance(result[-1], VideoBlock)
        assert result[-1].content == ""
        assert result[-1].order == 2

    def test_does_not_mutate_input(self, two_blocks):
        add_block(two_blocks, BlockType.AUDIO)
        assert [block.id for block in two_blocks] == ["a", "b"]

    def test_ids_are_unique(self):
        blocks = []
        for _ in range(50):
            blocks = add_block(blocks, "text")
        assert len({block.id for block in blocks}) == 50
        ensure_dense_order(blocks)

    def test_accepts_every_kind(self):
        blocks = []
        for block_type in BlockType:
            blocks = add_block(blocks, block_type)
        assert [block.type for block in blocks] == ["text", "image", "video", "audio"]

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            add_block([], "model3d")


class TestUpdateContent:

    def test_replaces_content_only(self, two_blocks):
        result = update_content(two_blocks, "b", "https://example.com/new.png")

        assert result[1].content == "https://example.com/new.png"
        assert result[1].type == "image"
        assert result[1].order == 1
        assert result[0] == two_blocks[0]

    def test_missing_id_is_noop(self, two_blocks):
        assert update_content(two_blocks, "zzz", "x") == two_blocks

    def test_preserves_whitespace(self, two_blocks):
        result = update_content(two_blocks, "a", "  line one\n\nline two  ")
        assert result[0].content == "  line one\n\nline two  "


class TestRemoveBlock:

    def test_remove_first_renumbers(self, two_blocks):
        result = remove_block(two_blocks, "a")

        assert len(result) == 1
        assert result[0].id == "b"
        assert result[0].type == "image"
        assert result[0].order == 0

    def test_missing_id_is_noop(self, two_blocks):
        assert remove_block(two_blocks, "zzz") == two_blocks

    def test_remove_middle_keeps_order_dense(self):
        blocks = renumber(TextBlock(id=str(i), content=str(i)) for i in range(5))
        result = remove_block(blocks, "2")

        assert [block.id for block in result] == ["0", "1", "3", "4"]
        ensure_dense_order(result)


class TestReorder:

    def test_swap(self, two_blocks):
        result = reorder(two_blocks, [two_blocks[1], two_blocks[0]])

        assert [(block.id, block.order) for block in result] == [("b", 0), ("a", 1)]

    def test_by_ids(self, two_blocks):
        result = reorder(two_blocks, ["b", "a"])
        assert [block.id for block in result] == ["b", "a"]

    def test_identity_is_noop(self, two_blocks):
        assert reorder(two_blocks, list(two_blocks)) == two_blocks

    def test_content_taken_from_current_collection(self, two_blocks):
        stale = TextBlock(id="a", content="stale", order=0)
        result = reorder(two_blocks, [two_blocks[1], stale])
        assert result[1].content == "hello"

    @pytest.mark.parametrize(
        "sequence",
        [
            ["a"],
            ["a", "b", "c"],
            ["a", "a"],
            ["a", "c"],
            [],
        ],
    )
    def test_mismatched_sequence_fails_fast(self, two_blocks, sequence):
        with pytest.raises(BlockSequenceMismatch):
            reorder(two_blocks, sequence)

    def test_duplicate_ids_in_collection_are_rejected(self):
        blocks = [
            TextBlock(id="a", content="first", order=0),
            ImageBlock(id="a", content="https://example.com/a.png", order=1),
            TextBlock(id="b", content="second", order=2),
        ]

        with pytest.raises(BlockSequenceMismatch):
            reorder(blocks, ["b", "a"])
        with pytest.raises(BlockSequenceMismatch):
            reorder(blocks, ["b", "a", "a"])


class TestInvariants:

    def test_block_type_is_immutable(self, two_blocks):
        with pytest.raises(ValidationError):
            two_blocks[0].type = "image"

    def test_random_edits_keep_order_dense(self):
        rng = random.Random(7)
        blocks = []
        kinds = list(BlockType)
        for _ in range(300):
            op = rng.choice(["add", "add", "remove", "reorder", "update"])
            if op == "add" or not blocks:
                before = [block.order for block in blocks]
                blocks = add_block(blocks, rng.choice(kinds))
                assert [block.order for block in blocks[:-1]] == before
            elif op == "remove":
                blocks = remove_block(blocks, rng.choice(blocks).id)
            elif op == "reorder":
                sequence = list(blocks)
                rng.shuffle(sequence)
                blocks = reorder(blocks, sequence)
            else:
                blocks = update_content(blocks, rng.choice(blocks).id, str(rng.random()))
            ensure_dense_order(blocks)

    def test_ensure_dense_order_detects_gaps(self):
        with pytest.raises(ValueError):
            ensure_dense_order([AudioBlock(id="x", order=1)])

    def test_ensure_dense_order_detects_duplicate_ids(self):
        with pytest.raises(ValueError):
            ensure_dense_order([AudioBlock(id="x", order=0), TextBlock(id="x", order=1)])

    def test_duplicate_ids_reports_each_repeat_once(self):
        blocks = [
            TextBlock(id="a", order=0),
            ImageBlock(id="a", order=1),
            TextBlock(id="b", order=2),
            AudioBlock(id="a", order=3),
            VideoBlock(id="b", order=4),
        ]
        assert duplicate_ids(blocks) == ["a", "b"]
        assert duplicate_ids(blocks[2:4]) == []
