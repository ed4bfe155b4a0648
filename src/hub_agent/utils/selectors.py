"""Kubernetes label selector evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import SelectorError

OP_IN = "In"
OP_NOT_IN = "NotIn"
OP_EXISTS = "Exists"
OP_DOES_NOT_EXIST = "DoesNotExist"


@dataclass(frozen=True)
class Requirement:
    """A single label requirement."""

    key: str
    operator: str
    values: frozenset[str] = frozenset()

    def matches(self, labels: Mapping[str, str]) -> bool:
        if self.operator == OP_IN:
            return self.key in labels and labels[self.key] in self.values
        if self.operator == OP_NOT_IN:
            return self.key not in labels or labels[self.key] not in self.values
        if self.operator == OP_EXISTS:
            return self.key in labels
        return self.key not in labels


@dataclass(frozen=True)
class Selector:
    """A conjunction of label requirements.

    An empty selector matches everything.
    """

    requirements: tuple[Requirement, ...] = ()

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(req.matches(labels) for req in self.requirements)

    def __str__(self) -> str:
        parts = []
        for req in self.requirements:
            values = ",".join(sorted(req.values))
            if req.operator == OP_IN and len(req.values) == 1:
                parts.append(f"{req.key}={values}")
            elif req.operator == OP_IN:
                parts.append(f"{req.key} in ({values})")
            elif req.operator == OP_NOT_IN:
                parts.append(f"{req.key} notin ({values})")
            elif req.operator == OP_EXISTS:
                parts.append(req.key)
            else:
                parts.append(f"!{req.key}")
        return ",".join(parts)


def label_selector_as_selector(selector: Mapping[str, Any] | None) -> Selector | None:
    """Convert a LabelSelector document into a Selector.

    Args:
        selector: Document with optional matchLabels and matchExpressions,
            or None

    Returns:
        The selector, or None when no selector is given

    Raises:
        SelectorError: If the selector is malformed
    """
    if selector is None:
        return None
    if not isinstance(selector, Mapping):
        raise SelectorError(f"label selector must be an object, got {type(selector).__name__}")

    requirements: list[Requirement] = []

    match_labels = selector.get("matchLabels") or {}
    if not isinstance(match_labels, Mapping):
        raise SelectorError("matchLabels must be an object")
    for key in sorted(match_labels):
        _validate_key(key)
        requirements.append(Requirement(key, OP_IN, frozenset([str(match_labels[key])])))

    for expr in selector.get("matchExpressions") or []:
        key = expr.get("key", "")
        operator = expr.get("operator", "")
        values = expr.get("values") or []
        _validate_key(key)

        if operator in (OP_IN, OP_NOT_IN):
            if not values:
                raise SelectorError(f"values must be non-empty for operator {operator!r} on key {key!r}")
        elif operator in (OP_EXISTS, OP_DOES_NOT_EXIST):
            if values:
                raise SelectorError(f"values must be empty for operator {operator!r} on key {key!r}")
        else:
            raise SelectorError(f"{operator!r} is not a valid label selector operator")

        requirements.append(Requirement(key, operator, frozenset(str(v) for v in values)))

    return Selector(tuple(requirements))


def _validate_key(key: Any) -> None:
    if not isinstance(key, str) or not key:
        raise SelectorError(f"invalid label key {key!r}")
