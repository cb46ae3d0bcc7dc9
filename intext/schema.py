# Copyright 2025 Google LLC.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Schema nodes describing the shape of extracted data.

A schema is a tree of nodes, one of five kinds: string, number, boolean,
array (with an item node) and object (with named property nodes). Any node may
carry a description and an enumeration of allowed values. Callers may build
nodes directly or pass the JSON-Schema-like dictionary form:

  {
      "type": "object",
      "properties": {
          "status": {"type": "string", "enum": ["open", "closed"]},
          "tags": {"type": "array", "items": {"type": "string"}},
      },
  }
"""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
import types
from typing import Any, ClassVar

from intext import exceptions

EnumValue = str | int | float | bool | None

_ENUM_VALUE_TYPES = (str, int, float, bool, type(None))


@dataclasses.dataclass(frozen=True, kw_only=True)
class SchemaNode:
  """Base class for schema nodes.

  Attributes:
    description: Human-readable hint passed to the completion service.
    enum: Finite set of allowed values, or None when unrestricted.
  """

  type_name: ClassVar[str] = ""

  description: str | None = None
  enum: tuple[EnumValue, ...] | None = None

  def __post_init__(self):
    if self.enum is not None:
      object.__setattr__(self, "enum", tuple(self.enum))

  @property
  def is_container(self) -> bool:
    return False

  def to_dict(self) -> dict[str, Any]:
    """Renders the node in its JSON-Schema-like dictionary form."""
    out: dict[str, Any] = {"type": self.type_name}
    if self.description is not None:
      out["description"] = self.description
    if self.enum is not None:
      out["enum"] = list(self.enum)
    return out


@dataclasses.dataclass(frozen=True, kw_only=True)
class StringNode(SchemaNode):
  type_name: ClassVar[str] = "string"


@dataclasses.dataclass(frozen=True, kw_only=True)
class NumberNode(SchemaNode):
  type_name: ClassVar[str] = "number"


@dataclasses.dataclass(frozen=True, kw_only=True)
class BooleanNode(SchemaNode):
  type_name: ClassVar[str] = "boolean"


@dataclasses.dataclass(frozen=True, kw_only=True)
class ArrayNode(SchemaNode):
  """An array whose elements all follow `items`."""

  type_name: ClassVar[str] = "array"

  items: SchemaNode

  @property
  def is_container(self) -> bool:
    return True

  def to_dict(self) -> dict[str, Any]:
    out = super().to_dict()
    out["items"] = self.items.to_dict()
    return out


@dataclasses.dataclass(frozen=True, kw_only=True)
class ObjectNode(SchemaNode):
  """An object with named properties; the root of every schema is one."""

  type_name: ClassVar[str] = "object"

  properties: Mapping[str, SchemaNode] = dataclasses.field(
      default_factory=dict
  )
  required: tuple[str, ...] = ()

  def __post_init__(self):
    super().__post_init__()
    object.__setattr__(
        self, "properties", types.MappingProxyType(dict(self.properties))
    )
    object.__setattr__(self, "required", tuple(self.required))

  @property
  def is_container(self) -> bool:
    return True

  @property
  def field_names(self) -> list[str]:
    return list(self.properties)

  def to_dict(self) -> dict[str, Any]:
    out = super().to_dict()
    out["properties"] = {
        name: node.to_dict() for name, node in self.properties.items()
    }
    if self.required:
      out["required"] = list(self.required)
    return out


_SCALAR_NODES: dict[str, type[SchemaNode]] = {
    StringNode.type_name: StringNode,
    NumberNode.type_name: NumberNode,
    BooleanNode.type_name: BooleanNode,
}


def _parse_enum(raw: Any, path: str) -> tuple[EnumValue, ...] | None:
  if raw is None:
    return None
  if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple)):
    raise exceptions.SchemaError(f"{path}: 'enum' must be a list of values.")
  for value in raw:
    if not isinstance(value, _ENUM_VALUE_TYPES):
      raise exceptions.SchemaError(
          f"{path}: enum values must be strings, numbers, booleans or null,"
          f" got {type(value).__name__}."
      )
  return tuple(raw)


def from_dict(raw: Mapping[str, Any] | SchemaNode, path: str = "$") -> SchemaNode:
  """Builds a schema node from its dictionary form.

  Args:
    raw: A mapping with a "type" key, or an existing SchemaNode (returned as
      is).
    path: Location of `raw` in the schema, used in error messages.

  Returns:
    The corresponding SchemaNode tree.

  Raises:
    SchemaError: If the mapping does not describe a supported node.
  """
  if isinstance(raw, SchemaNode):
    return raw
  if not isinstance(raw, Mapping):
    raise exceptions.SchemaError(
        f"{path}: schema node must be a mapping, got {type(raw).__name__}."
    )

  type_name = raw.get("type")
  description = raw.get("description")
  if description is not None and not isinstance(description, str):
    raise exceptions.SchemaError(f"{path}: 'description' must be a string.")
  enum = _parse_enum(raw.get("enum"), path)

  if type_name in _SCALAR_NODES:
    return _SCALAR_NODES[type_name](description=description, enum=enum)

  if type_name == ArrayNode.type_name:
    if "items" not in raw:
      raise exceptions.SchemaError(f"{path}: array node requires 'items'.")
    return ArrayNode(
        description=description,
        enum=enum,
        items=from_dict(raw["items"], f"{path}.items"),
    )

  if type_name == ObjectNode.type_name:
    properties = raw.get("properties") or {}
    if not isinstance(properties, Mapping):
      raise exceptions.SchemaError(f"{path}: 'properties' must be a mapping.")
    required = raw.get("required") or ()
    if isinstance(required, str) or not all(
        isinstance(name, str) for name in required
    ):
      raise exceptions.SchemaError(
          f"{path}: 'required' must be a list of field names."
      )
    return ObjectNode(
        description=description,
        enum=enum,
        properties={
            str(name): from_dict(node, f"{path}.{name}")
            for name, node in properties.items()
        },
        required=tuple(required),
    )

  raise exceptions.SchemaError(
      f"{path}: unsupported schema type {type_name!r}; expected one of"
      " string, number, boolean, array, object."
  )


def root_schema(raw: Mapping[str, Any] | SchemaNode | None) -> ObjectNode:
  """Validates and converts the schema passed to `extract`.

  Raises:
    SchemaError: If the schema is missing or its root is not an object node.
  """
  if raw is None:
    raise exceptions.SchemaError("schema is required")
  node = from_dict(raw)
  if not isinstance(node, ObjectNode):
    raise exceptions.SchemaError(
        f"root schema must be an object node, got {node.type_name!r}."
    )
  return node
