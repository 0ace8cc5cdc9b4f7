"""
Classification
==============
Splits caller-supplied metadata into scalar attributes and structured annotations.

Routing rules (per key):
    1. FALSY VALUES ARE DROPPED — None, "", 0, False and empty containers
       become neither attribute nor annotation
    2. MAPPINGS AND SEQUENCES → annotations (leaves validated recursively,
       stored as plain dict / list)
    3. str / int / float / bool → attributes
    4. Anything else is rejected with ValidationError, never stringified

Attribute values always stay scalar; annotation values always stay structured.
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from faultline.core.errors import ValidationError


# ---------------------------------------------------------------------------
# Classification Result
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ClassificationResult:
    """Attributes and annotations extracted from one metadata mapping."""
    attributes: dict[str, Any] = field(default_factory=dict)
    annotations: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Value Shapes
# ---------------------------------------------------------------------------
_SCALAR_TYPES = (str, bool, int, float)


def is_scalar(value: Any) -> bool:
    """Return True for values allowed as report attributes."""
    return isinstance(value, _SCALAR_TYPES)


def is_structured(value: Any) -> bool:
    """Return True for mappings and non-string sequences."""
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, Sequence))


def _to_plain(value: Any, path: str) -> Any:
    """Validate a tree and return it rebuilt from plain dicts and lists."""
    if value is None or is_scalar(value):
        return value
    if isinstance(value, Mapping):
        plain = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise ValidationError(f"Annotation '{path}' has a non-string key: {k!r}")
            plain[k] = _to_plain(v, f"{path}.{k}")
        return plain
    if is_structured(value):
        return [_to_plain(v, f"{path}[{i}]") for i, v in enumerate(value)]
    raise ValidationError(
        f"Annotation '{path}' contains unsupported value of type {type(value).__name__}"
    )


def validate_attribute(key: str, value: Any) -> None:
    """Raise ValidationError unless value is a scalar."""
    if not isinstance(key, str):
        raise ValidationError(f"Attribute key must be a string, got {type(key).__name__}")
    if not is_scalar(value):
        raise ValidationError(
            f"Attribute '{key}' must be str, int, float or bool, got {type(value).__name__}"
        )


def validate_annotation(key: str, value: Any) -> Any:
    """
    Validate an annotation value and return it as plain dicts and lists.

    Read-only mappings, tuples and other Mapping / Sequence types are copied
    into dict / list so the stored value can be deep-copied and serialized.

    Raises
    ------
    ValidationError
        Unless value is a mapping/sequence tree of scalars.
    """
    if not isinstance(key, str):
        raise ValidationError(f"Annotation key must be a string, got {type(key).__name__}")
    if not is_structured(value):
        raise ValidationError(
            f"Annotation '{key}' must be a mapping or sequence, got {type(value).__name__}"
        )
    return _to_plain(value, key)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def classify_attributes(metadata: Mapping[str, Any] | None) -> ClassificationResult:
    """
    Partition a caller metadata mapping into attributes and annotations.

    Parameters
    ----------
    metadata : Mapping[str, Any] | None
        Caller-supplied metadata. None is treated as empty.

    Returns
    -------
    ClassificationResult
        Frozen dataclass with the attribute and annotation dictionaries.

    Raises
    ------
    ValidationError
        If metadata is not a mapping, or a value is neither scalar nor structured.
    """
    if metadata is None:
        return ClassificationResult()
    if not isinstance(metadata, Mapping):
        raise ValidationError(f"Metadata must be a mapping, got {type(metadata).__name__}")

    attributes: dict[str, Any] = {}
    annotations: dict[str, Any] = {}
    for key, value in metadata.items():
        if not value:
            continue
        if is_structured(value):
            annotations[key] = validate_annotation(key, value)
        else:
            validate_attribute(key, value)
            attributes[key] = value

    return ClassificationResult(attributes=attributes, annotations=annotations)
