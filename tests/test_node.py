"""Tests for node identifiers."""

import pytest

from meritrank import MAX_NODE_ID, InvalidNode, NodeId, NodeIdParseError, as_node_id


class TestNodeId:
    """Tests for the NodeId sum type."""

    def test_concrete_ids_compare_by_value(self):
        """Test that equal integers give equal ids."""
        assert NodeId(5) == NodeId(5)
        assert NodeId(5) != NodeId(6)
        assert hash(NodeId(5)) == hash(NodeId(5))

    def test_sentinel_never_equals_concrete_id(self):
        """Test the absent sentinel against real ids."""
        assert NodeId.NONE != NodeId(0)
        assert NodeId.NONE == NodeId()
        assert not NodeId.NONE.is_present
        assert NodeId(0).is_present

    def test_not_equal_to_plain_int(self):
        """Test that a NodeId does not masquerade as an int."""
        assert NodeId(3) != 3

    def test_require(self):
        """Test extracting the integer value."""
        assert NodeId(9).require() == 9
        with pytest.raises(InvalidNode):
            NodeId.NONE.require()

    @pytest.mark.parametrize("value", [-1, MAX_NODE_ID + 1, True, "3", 1.0])
    def test_out_of_domain_rejected(self, value):
        """Test that non-integers and out-of-range values are rejected."""
        with pytest.raises(InvalidNode):
            NodeId(value)

    def test_domain_bounds(self):
        """Test the extreme valid ids."""
        assert NodeId(0).value == 0
        assert NodeId(MAX_NODE_ID).value == MAX_NODE_ID

    def test_str_and_repr(self):
        """Test display forms."""
        assert str(NodeId(12)) == "12"
        assert str(NodeId.NONE) == "None"
        assert repr(NodeId(12)) == "NodeId(12)"
        assert repr(NodeId.NONE) == "NodeId.NONE"

    def test_usable_as_dict_key(self):
        """Test hashing inside mappings."""
        scores = {NodeId(1): 0.5, NodeId(2): 0.25}
        assert scores[NodeId(1)] == 0.5
        assert NodeId.NONE not in scores


class TestParse:
    """Tests for NodeId.parse."""

    @pytest.mark.parametrize(
        "text,expected",
        [("0", 0), ("42", 42), (" 7 ", 7), (str(MAX_NODE_ID), MAX_NODE_ID)],
    )
    def test_valid(self, text, expected):
        """Test parsing decimal ids."""
        assert NodeId.parse(text) == NodeId(expected)

    def test_none_parses_to_sentinel(self):
        """Test that the display form of the sentinel round-trips."""
        assert NodeId.parse("None") is NodeId.NONE

    @pytest.mark.parametrize(
        "text", ["", "abc", "-1", "1.5", "0x10", str(MAX_NODE_ID + 1), "١٢"]
    )
    def test_malformed(self, text):
        """Test malformed identifiers."""
        with pytest.raises(NodeIdParseError) as exc_info:
            NodeId.parse(text)
        assert exc_info.value.text == text

    def test_non_string(self):
        """Test that only strings are parsed."""
        with pytest.raises(NodeIdParseError):
            NodeId.parse(17)

    def test_out_of_range_keeps_cause(self):
        """Test that the range failure is chained."""
        with pytest.raises(NodeIdParseError) as exc_info:
            NodeId.parse(str(MAX_NODE_ID + 1))
        assert isinstance(exc_info.value.cause, InvalidNode)


class TestAsNodeId:
    """Tests for coercion of caller-supplied ids."""

    def test_int_and_node_id(self):
        """Test both accepted input forms."""
        assert as_node_id(4) == NodeId(4)
        node = NodeId(4)
        assert as_node_id(node) is node

    @pytest.mark.parametrize("value", [None, NodeId.NONE, "4", -2])
    def test_rejects_non_concrete(self, value):
        """Test that the sentinel and junk never pass as a node."""
        with pytest.raises(InvalidNode):
            as_node_id(value)
