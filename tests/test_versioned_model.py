"""Tests for VersionedModel: live types nested in ordinary pydantic models."""

from __future__ import annotations

from typing import Annotated, Optional

import pytest
from pydantic import BaseModel

from versioned_json import CopyFrom, Decoder, VersionedModel, register
from versioned_json.exceptions import NotRegisteredError, UnsupportedVersionError


class NestedChild(VersionedModel):
    B: str = ""


class NestedChildV1(BaseModel):
    A: str = ""


class NestedChildV2(BaseModel):
    B: Annotated[str, CopyFrom("A")] = ""


class NestedParent(BaseModel):
    child: NestedChild
    others: list[NestedChild] = []
    maybe: Optional[NestedChild] = None


class Unregistered(VersionedModel):
    X: int = 0


class Leaf(VersionedModel):
    B: str = ""


class LeafV1(BaseModel):
    A: str = ""


class LeafV2(BaseModel):
    B: Annotated[str, CopyFrom("A")] = ""


class Mid(VersionedModel):
    leaf: Optional[Leaf] = None


class MidV1(BaseModel):
    leaf: Optional[Leaf] = None


class Outer(BaseModel):
    mid: Mid


@pytest.fixture
def _registered() -> None:
    register(NestedChild, NestedChildV1, NestedChildV2)


@pytest.mark.usefixtures("_registered")
class TestJsonMode:
    """JSON-mode validation and serialization go through the registry."""

    def test_validate_nested(self) -> None:
        parent = NestedParent.model_validate_json('{"child":{"Version":1,"A":"b"}}')

        assert isinstance(parent.child, NestedChild)
        assert parent.child.B == "b"

    def test_validate_nested_list(self) -> None:
        parent = NestedParent.model_validate_json(
            '{"child":{"Version":2,"B":"x"},"others":[{"A":"y"},{"Version":2,"B":"z"}]}'
        )

        assert [child.B for child in parent.others] == ["y", "z"]

    def test_validate_optional_null(self) -> None:
        parent = NestedParent.model_validate_json('{"child":{"A":"a"},"maybe":null}')

        assert parent.maybe is None

    def test_validate_top_level(self) -> None:
        child = NestedChild.model_validate_json('{"A":"top"}')

        assert child == NestedChild(B="top")

    def test_serialize_nested(self) -> None:
        parent = NestedParent(child=NestedChild(B="b"))

        assert parent.model_dump_json() == (
            '{"child":{"Version":2,"B":"b"},"others":[],"maybe":null}'
        )

    def test_serialize_top_level(self) -> None:
        assert NestedChild(B="b").model_dump_json() == '{"Version":2,"B":"b"}'

    def test_round_trip(self) -> None:
        parent = NestedParent(
            child=NestedChild(B="1"), others=[NestedChild(B="2")], maybe=None
        )

        restored = NestedParent.model_validate_json(parent.model_dump_json())

        assert restored == parent

    def test_version_error_propagates(self) -> None:
        with pytest.raises(UnsupportedVersionError):
            NestedParent.model_validate_json('{"child":{"Version":7,"B":"b"}}')



@pytest.fixture
def _registered_deep() -> None:
    register(Leaf, LeafV1, LeafV2)
    register(Mid, MidV1)


@pytest.mark.usefixtures("_registered_deep")
class TestDeepNesting:
    """Versioned values nested in versioned values are decoded at every depth."""

    def test_validate_two_levels(self) -> None:
        outer = Outer.model_validate_json(
            '{"mid":{"Version":1,"leaf":{"Version":1,"A":"x"}}}'
        )

        assert outer.mid.leaf == Leaf(B="x")

    def test_decode_parsed_payload(self) -> None:
        """Already-parsed dicts go through the registry for nested values too."""
        mid = Decoder().decode({"Version": 1, "leaf": {"Version": 1, "A": "x"}}, Mid)

        assert mid is not None
        assert mid.leaf == Leaf(B="x")

    def test_decode_parsed_payload_nested_error(self) -> None:
        with pytest.raises(UnsupportedVersionError):
            Decoder().decode({"Version": 1, "leaf": {"Version": 9, "B": "x"}}, Mid)

    def test_serialize_two_levels(self) -> None:
        outer = Outer(mid=Mid(leaf=Leaf(B="y")))

        data = outer.model_dump_json()

        assert data == '{"mid":{"Version":1,"leaf":{"Version":2,"B":"y"}}}'
        assert Outer.model_validate_json(data) == outer

    def test_plain_model_validate_is_untouched(self) -> None:
        mid = Mid.model_validate({"leaf": {"B": "plain"}})

        assert mid.leaf == Leaf(B="plain")


@pytest.mark.usefixtures("_registered")
class TestPythonMode:
    """Python-mode construction and dumps are left untouched."""

    def test_constructor(self) -> None:
        child = NestedChild(B="plain")

        assert child.B == "plain"

    def test_model_validate_dict(self) -> None:
        child = NestedChild.model_validate({"B": "plain"})

        assert child.B == "plain"

    def test_model_dump(self) -> None:
        parent = NestedParent(child=NestedChild(B="b"))

        assert parent.model_dump() == {
            "child": {"B": "b"},
            "others": [],
            "maybe": None,
        }


class TestShortcuts:
    def test_to_json_and_from_json(self, _registered: None) -> None:
        data = NestedChild(B="b").to_json()

        assert data == b'{"Version":2,"B":"b"}'
        assert NestedChild.from_json(b'{"Version":1,"A":"b"}') == NestedChild(B="b")
        assert NestedChild.from_json(b"null") is None

    def test_unregistered(self) -> None:
        with pytest.raises(NotRegisteredError):
            Unregistered.from_json(b'{"X":1}')

        with pytest.raises(NotRegisteredError):
            Unregistered.model_validate_json(b'{"X":1}')
