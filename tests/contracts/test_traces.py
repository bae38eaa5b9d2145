"""Tests for the trace data model."""

import json

import pytest

from crystal_transfer.contracts import BlockTrace, BlockTraces, StorageMethod


def _aggregate(**overrides: object) -> BlockTraces:
    fields: dict[str, object] = {
        "block_hash": "0x" + "ab" * 32,
        "block_parent_hash": "0x" + "cd" * 32,
        "block_number": 7,
        "runtime_version": 9430,
        "is_finalized": False,
        "traces": (
            BlockTrace(index=0, key="k0", value="v0", ext_id="7-0", method=StorageMethod.Put),
            BlockTrace(index=2, key="k2", value="v2", ext_id="7-1", method=StorageMethod.Append, parent_id="7-0"),
        ),
    }
    fields.update(overrides)
    return BlockTraces(**fields)  # type: ignore[arg-type]


class TestBlockTraces:
    def test_to_dict_is_json_serializable(self) -> None:
        data = _aggregate().to_dict()

        # Round trip through json proves every value is a JSON primitive
        assert json.loads(json.dumps(data)) == data
        assert data["traces"][1]["method"] == "Append"
        assert data["traces"][1]["parent_id"] == "7-0"
        assert data["traces"][0]["parent_id"] is None

    def test_frozen(self) -> None:
        aggregate = _aggregate()
        with pytest.raises(AttributeError):
            aggregate.block_number = 8  # type: ignore[misc]

    def test_negative_block_number_rejected(self) -> None:
        with pytest.raises(ValueError, match="block_number"):
            _aggregate(block_number=-1)

    def test_negative_runtime_version_rejected(self) -> None:
        with pytest.raises(ValueError, match="runtime_version"):
            _aggregate(runtime_version=-1)

    def test_parent_id_is_not_validated(self) -> None:
        """parent_id is opaque: it need not match any ext_id in the block."""
        trace = BlockTrace(index=0, key="k", value="v", ext_id="1-0", method=StorageMethod.Genesis, parent_id="elsewhere")
        aggregate = _aggregate(traces=(trace,))
        assert aggregate.traces[0].parent_id == "elsewhere"
