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

"""Library for resolving completion output.

In the context of this module, "resolving" means turning the text a completion
service returned into structured data and bringing that data in line with the
extraction schema. Services are asked for bare JSON, but the parser also
accepts fenced output, JSON wrapped in prose and, as a last resort, YAML.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
import math
import re
from typing import Any

from absl import logging
import yaml

from intext import data
from intext import exceptions
from intext import prompting
from intext import schema as schema_lib

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_FENCE_PATTERN = re.compile(
    r"\A```(?:json|yaml|yml)?[ \t]*\r?\n?(.*?)```\Z", re.DOTALL | re.IGNORECASE
)


def _early_sanitize_input(input_str: str) -> str:
  """Removes ASCII control characters except TAB, LF and CR."""
  sanitized = _CONTROL_CHARS.sub("", input_str)
  if len(sanitized) != len(input_str):
    logging.debug(
        "Early sanitization removed %d control characters",
        len(input_str) - len(sanitized),
    )
  return sanitized


def _strip_fence(content: str) -> str:
  match = _FENCE_PATTERN.search(content)
  if match:
    return match.group(1).strip()
  return content


def _first_balanced_object(text: str) -> str | None:
  """Returns the first balanced {...} span in `text`, honouring strings."""
  start = text.find("{")
  if start == -1:
    return None
  depth = 0
  in_string = False
  escaped = False
  for i in range(start, len(text)):
    ch = text[i]
    if in_string:
      if escaped:
        escaped = False
      elif ch == "\\":
        escaped = True
      elif ch == '"':
        in_string = False
      continue
    if ch == '"':
      in_string = True
    elif ch == "{":
      depth += 1
    elif ch == "}":
      depth -= 1
      if depth == 0:
        return text[start : i + 1]
  return None


def parse_json_text(input_string: str) -> Any:
  """Parses completion text into a Python value.

  Tried in order: strict JSON on the whole text, strict JSON inside a fence
  that wraps the whole text, the first balanced JSON object embedded in
  surrounding prose, and YAML. YAML results must also be representable as
  JSON.

  Args:
    input_string: Raw completion text.

  Returns:
    The parsed value, which may be any JSON type.

  Raises:
    ResolverParsingError: If the text is empty or no strategy could parse it.
  """
  if not isinstance(input_string, str) or not input_string.strip():
    raise exceptions.ResolverParsingError(
        "Input string must be a non-empty string."
    )

  sanitized = _early_sanitize_input(input_string).strip()
  try:
    return json.loads(sanitized)
  except json.JSONDecodeError as je:
    logging.debug("Strict JSON parse failed: %s", je)

  content = _strip_fence(sanitized)
  if content != sanitized:
    try:
      return json.loads(content)
    except json.JSONDecodeError as je:
      logging.debug("Fenced JSON parse failed: %s", je)

  candidate = _first_balanced_object(content)
  if candidate is not None and candidate != content:
    try:
      parsed = json.loads(candidate)
      logging.debug("Parsed first embedded JSON object.")
      return parsed
    except json.JSONDecodeError as je:
      logging.debug("Embedded JSON object parse failed: %s", je)

  try:
    parsed = yaml.safe_load(content)
  except yaml.YAMLError as ye:
    raise exceptions.ResolverParsingError(
        "Failed to parse content as JSON or YAML."
    ) from ye

  # YAML also yields dates, sets and other values JSON cannot carry.
  try:
    parsed = json.loads(json.dumps(parsed, allow_nan=True))
  except (TypeError, ValueError) as e:
    raise exceptions.ResolverParsingError(
        "YAML content holds values that are not valid JSON data."
    ) from e
  logging.debug("YAML fallback succeeded.")
  return parsed


def parse_json_object(input_string: str) -> dict[str, Any] | None:
  """Parses completion text, returning None unless it yields an object."""
  try:
    parsed = parse_json_text(input_string)
  except exceptions.ResolverParsingError as e:
    logging.debug("Could not parse completion text: %s", e)
    return None
  if not isinstance(parsed, dict):
    logging.debug(
        "Completion text parsed to %s, expected an object.",
        type(parsed).__name__,
    )
    return None
  return parsed


def _is_number(value: Any) -> bool:
  return isinstance(value, (int, float)) and not isinstance(value, bool)


def same_value(left: Any, right: Any) -> bool:
  """Strict value equality for enumeration checks.

  Booleans only equal booleans, numbers compare by value regardless of int or
  float, NaN equals NaN, and everything else must match in type and value.
  """
  if _is_number(left) and _is_number(right):
    if isinstance(left, float) and isinstance(right, float):
      if math.isnan(left) and math.isnan(right):
        return True
    return left == right
  return type(left) is type(right) and left == right


def is_enum_member(
    value: Any, allowed: Sequence[schema_lib.EnumValue]
) -> bool:
  return any(same_value(candidate, value) for candidate in allowed)


def normalize_field(value: Any, field: schema_lib.SchemaNode) -> Any:
  """Applies enumeration constraints of `field` to one parsed value.

  Args:
    value: The value the service returned for the field, or None.
    field: The field's schema node.

  Returns:
    None when a scalar enumeration rejects the value (an empty enumeration
    rejects every value); for arrays of scalars with a non-empty item
    enumeration, a new list holding only the allowed items;
    otherwise the value unchanged.
  """
  if (
      field.enum is not None
      and value is not None
      and not is_enum_member(value, field.enum)
  ):
    logging.debug("Value %r is not in enumeration; discarding.", value)
    value = None

  if isinstance(field, schema_lib.ArrayNode) and isinstance(value, list):
    item_enum = field.items.enum
    if item_enum and not field.items.is_container:
      value = [item for item in value if is_enum_member(item, item_enum)]

  return value


def _confidence_scores(
    parsed: Mapping[str, Any], schema: schema_lib.ObjectNode
) -> dict[str, float]:
  scores = {}
  for field_id in schema.properties:
    score = parsed.get(prompting.CONFIDENCE_KEY_PREFIX + field_id)
    if _is_number(score) and 0.0 <= score <= 1.0:
      scores[field_id] = float(score)
  return scores


def normalize_window_result(
    window_id: int,
    raw: str,
    parsed: Mapping[str, Any] | None,
    schema: schema_lib.ObjectNode,
) -> data.WindowResult:
  """Shapes one window's parsed output to the schema's top-level fields.

  Every declared field is present in the result; absent or rejected values
  are None and undeclared keys are dropped. A None `parsed` (failed call or
  unparsable text) yields an all-null result.

  Args:
    window_id: Id of the window the output belongs to.
    raw: The completion text, kept for diagnostics.
    parsed: The parsed object, or None.
    schema: Root schema.

  Returns:
    The normalized WindowResult.
  """
  parsed = parsed or {}
  normalized = {
      field_id: normalize_field(parsed.get(field_id), field)
      for field_id, field in schema.properties.items()
  }
  return data.WindowResult(
      window_id=window_id,
      parsed=normalized,
      raw=raw,
      confidence=_confidence_scores(parsed, schema),
  )
