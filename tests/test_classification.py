"""
Unit Tests — Attribute Classification
======================================
Routing of caller metadata into attributes vs annotations, and shape
validation of single attribute / annotation values.
"""
from types import MappingProxyType

import pytest

from faultline.core.errors import ValidationError
from faultline.parser.classification import (
    ClassificationResult,
    classify_attributes,
    is_scalar,
    is_structured,
    validate_annotation,
    validate_attribute,
)


# ===========================================================================
# 1. Routing
# ===========================================================================
class TestClassifyAttributes:

    def test_object_value_goes_to_annotations(self):
        r = classify_attributes({"x": {"nested": True}})
        assert r.annotations == {"x": {"nested": True}}
        assert "x" not in r.attributes

    def test_scalar_value_goes_to_attributes(self):
        r = classify_attributes({"y": 5})
        assert r.attributes == {"y": 5}
        assert "y" not in r.annotations

    def test_list_is_structured(self):
        r = classify_attributes({"tags": ["a", "b"]})
        assert r.annotations == {"tags": ["a", "b"]}

    def test_falsy_values_are_skipped(self):
        r = classify_attributes({"a": 0, "b": "", "c": None, "d": False, "e": {}, "f": []})
        assert r.attributes == {}
        assert r.annotations == {}

    def test_mixed_mapping(self):
        r = classify_attributes({"user": "42", "ratio": 0.5, "ok": True, "req": {"path": "/"}})
        assert r.attributes == {"user": "42", "ratio": 0.5, "ok": True}
        assert r.annotations == {"req": {"path": "/"}}

    def test_none_metadata_is_empty(self):
        assert classify_attributes(None) == ClassificationResult()

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError):
            classify_attributes(["a", "b"])

    def test_unsupported_value_rejected(self):
        with pytest.raises(ValidationError):
            classify_attributes({"obj": object()})

    def test_unsupported_nested_leaf_rejected(self):
        with pytest.raises(ValidationError):
            classify_attributes({"req": {"handler": object()}})

    def test_bytes_not_treated_as_sequence(self):
        with pytest.raises(ValidationError):
            classify_attributes({"raw": b"abc"})


# ===========================================================================
# 2. Value shapes
# ===========================================================================
class TestValueShapes:

    @pytest.mark.parametrize("value", ["s", 1, 1.5, True])
    def test_scalars(self, value):
        assert is_scalar(value)
        assert not is_structured(value)

    @pytest.mark.parametrize("value", [{}, [], (1, 2)])
    def test_structured(self, value):
        assert is_structured(value)
        assert not is_scalar(value)

    def test_validate_attribute_rejects_mapping(self):
        with pytest.raises(ValidationError):
            validate_attribute("k", {"a": 1})

    def test_validate_attribute_rejects_non_string_key(self):
        with pytest.raises(ValidationError):
            validate_attribute(1, "v")

    def test_validate_annotation_rejects_scalar(self):
        with pytest.raises(ValidationError):
            validate_annotation("k", "text")

    def test_validate_annotation_accepts_none_leaves(self):
        validate_annotation("k", {"a": None, "b": [1, {"c": "d"}]})

    def test_validate_annotation_returns_plain_containers(self):
        value = MappingProxyType({"a": (1, MappingProxyType({"b": "c"}))})
        plain = validate_annotation("k", value)
        assert plain == {"a": [1, {"b": "c"}]}
        assert type(plain) is dict
        assert type(plain["a"]) is list
        assert type(plain["a"][1]) is dict

    def test_classified_annotations_are_plain(self):
        r = classify_attributes({"cfg": MappingProxyType({"a": 1}), "pair": ("x", "y")})
        assert r.annotations == {"cfg": {"a": 1}, "pair": ["x", "y"]}
        assert type(r.annotations["cfg"]) is dict

    def test_validate_annotation_rejects_non_string_nested_key(self):
        with pytest.raises(ValidationError):
            validate_annotation("k", {1: "a"})
