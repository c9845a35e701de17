# baseball_teams/storage/expressions.py
"""Builder for DynamoDB update expressions.

Attribute names are always sent through ``#n<k>`` placeholders and values
through ``:v<k>`` placeholders, so reserved words never collide with schema
names. Actions are grouped into clauses in SET, REMOVE, ADD, DELETE order.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import UpdateExpressionError

AttributeValue = Dict[str, Any]

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-.]+$")
_CLAUSE_ORDER = ("SET", "REMOVE", "ADD", "DELETE")


@dataclass(frozen=True)
class UpdateExpression:
    """A built update expression, ready to splat into UpdateItem."""

    expression: str
    names: Dict[str, str]
    values: Dict[str, AttributeValue] = field(default_factory=dict)

    def as_request(self) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "UpdateExpression": self.expression,
            "ExpressionAttributeNames": self.names,
        }
        # DynamoDB rejects an empty ExpressionAttributeValues map
        if self.values:
            request["ExpressionAttributeValues"] = self.values
        return request


class UpdateExpressionBuilder:
    """Accumulates update actions and renders them as one expression."""

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}
        self._values: Dict[str, AttributeValue] = {}
        self._actions: Dict[str, List[str]] = {clause: [] for clause in _CLAUSE_ORDER}
        self._paths: List[Tuple[str, Optional[int]]] = []
        self._errors: List[str] = []

    def _name(self, name: str) -> str:
        if name not in self._names:
            self._names[name] = f"#n{len(self._names)}"
        return self._names[name]

    def _value(self, value: AttributeValue) -> str:
        placeholder = f":v{len(self._values)}"
        self._values[placeholder] = value
        return placeholder

    def _path(self, name: str, index: Optional[int] = None) -> Optional[str]:
        """Registers a document path, recording an error if it is invalid or overlaps."""
        if not isinstance(name, str) or not _NAME_PATTERN.match(name):
            self._errors.append(f"invalid attribute name {name!r}")
            return None
        if index is not None and (
            isinstance(index, bool) or not isinstance(index, int) or index < 0
        ):
            self._errors.append(f"invalid list index {index!r} for '{name}'")
            return None
        for seen_name, seen_index in self._paths:
            if seen_name == name and (
                seen_index is None or index is None or seen_index == index
            ):
                shown = name if index is None else f"{name}[{index}]"
                self._errors.append(f"two document paths overlap at '{shown}'")
                return None
        self._paths.append((name, index))
        placeholder = self._name(name)
        return placeholder if index is None else f"{placeholder}[{index}]"

    def set(self, name: str, value: AttributeValue) -> "UpdateExpressionBuilder":
        path = self._path(name)
        if path:
            self._actions["SET"].append(f"{path} = {self._value(value)}")
        return self

    def list_append(self, name: str, value: AttributeValue) -> "UpdateExpressionBuilder":
        """SET name = list_append(name, value): appends to the end of a list."""
        path = self._path(name)
        if path:
            self._actions["SET"].append(
                f"{path} = list_append({path}, {self._value(value)})"
            )
        return self

    def remove(self, name: str, index: Optional[int] = None) -> "UpdateExpressionBuilder":
        """Removes a whole attribute, or one list element when index is given."""
        path = self._path(name, index)
        if path:
            self._actions["REMOVE"].append(path)
        return self

    def add(self, name: str, value: AttributeValue) -> "UpdateExpressionBuilder":
        """Set union (or numeric increment) on name."""
        path = self._path(name)
        if path:
            self._actions["ADD"].append(f"{path} {self._value(value)}")
        return self

    def delete(self, name: str, value: AttributeValue) -> "UpdateExpressionBuilder":
        """Set subtraction on name."""
        path = self._path(name)
        if path:
            self._actions["DELETE"].append(f"{path} {self._value(value)}")
        return self

    def build(self) -> UpdateExpression:
        if self._errors:
            raise UpdateExpressionError("; ".join(self._errors))
        clauses = [
            f"{clause} {', '.join(self._actions[clause])}"
            for clause in _CLAUSE_ORDER
            if self._actions[clause]
        ]
        if not clauses:
            raise UpdateExpressionError("update expression has no actions")
        return UpdateExpression(
            expression=" ".join(clauses),
            names={placeholder: name for name, placeholder in self._names.items()},
            values=dict(self._values),
        )
