"""
Unit tests for the WireModel base class.
"""

import logging

import pytest
from pydantic import Field

from ingest_schemas.base import WireModel
from ingest_schemas.exceptions import SchemaValidationError


class NodeRef(WireModel):
    node_name: str
    node_index: int = Field(..., ge=0)
    tags: list[str] = Field(default_factory=list)


class TestWireModel:
    """Tests for shared wire model behavior."""

    def test_camel_case_on_wire(self):
        """Fields serialize under camelCase names."""
        assert NodeRef(node_name="node-0", node_index=0).to_dict() == {
            "nodeName": "node-0",
            "nodeIndex": 0,
            "tags": [],
        }

    def test_accepts_both_names(self):
        """Construction accepts snake_case and camelCase names."""
        assert NodeRef(nodeName="node-0", nodeIndex=0) == NodeRef(node_name="node-0", node_index=0)

    def test_assignment_is_validated(self):
        """Invalid assignments are rejected."""
        ref = NodeRef(node_name="node-0", node_index=0)

        with pytest.raises(ValueError):
            ref.node_index = -1

        assert ref.node_index == 0

    def test_clone_is_deep(self):
        """Clones own their lists."""
        ref = NodeRef(node_name="node-0", node_index=0, tags=["a"])
        clone = ref.clone()
        clone.tags.append("b")

        assert ref.tags == ["a"]

    def test_error_names_every_field(self):
        """Each failing field is listed with the model name."""
        with pytest.raises(SchemaValidationError) as exc_info:
            NodeRef.from_dict({"nodeIndex": -1})

        assert exc_info.value.type_name == "NodeRef"
        paths = [error.split(":")[0] for error in exc_info.value.errors]
        assert paths == ["NodeRef.nodeName", "NodeRef.nodeIndex"]

    def test_decode_failure_logged(self, caplog):
        """Failed decodes are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="ingest_schemas.base"):
            with pytest.raises(SchemaValidationError):
                NodeRef.from_json("not json")

        assert any("Failed to decode NodeRef" in record.getMessage() for record in caplog.records)
