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

"""Prompt templates for per-window extraction and the final reduction.

Both builders are pure: the same window, results and schema always render the
same text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
from typing import Any

from intext import chunking
from intext import data
from intext import schema as schema_lib

EXTRACTOR_PREAMBLE = "You are a JSON extractor."
REDUCER_PREAMBLE = "You are a JSON reducer."

# Arrays inside a window result are cut to this many items in the reduction
# prompt so its size stays bounded by the window count.
MAX_REDUCTION_ARRAY_ITEMS = 12

CONFIDENCE_KEY_PREFIX = "_confidence_"


def format_enum_values(values: Sequence[schema_lib.EnumValue]) -> str:
  return ", ".join(json.dumps(value, ensure_ascii=False) for value in values)


def describe_field(field_id: str, field: schema_lib.SchemaNode) -> str:
  """One bullet line naming a field, its type and any hints."""
  hints = []
  if field.description:
    hints.append(field.description)
  if field.enum:
    hints.append(f"allowed values: {format_enum_values(field.enum)}")
  elif isinstance(field, schema_lib.ArrayNode) and field.items.enum:
    hints.append(
        f"allowed item values: {format_enum_values(field.items.enum)}"
    )

  hint = f" Hint: {'; '.join(hints)}" if hints else ""
  return f'- "{field_id}" ({field.type_name}){hint}'


def per_window_prompt(
    window: chunking.Window, schema: schema_lib.ObjectNode
) -> str:
  """Builds the extraction instructions for a single window.

  Args:
    window: The window whose text is the only input the service sees.
    schema: Root schema; each top-level property becomes one output field.

  Returns:
    Prompt text asking for exactly one JSON object.
  """
  field_lines = "\n".join(
      describe_field(field_id, field)
      for field_id, field in schema.properties.items()
  )
  return (
      f"{EXTRACTOR_PREAMBLE} Given the CHUNK of text, extract the following"
      " fields and return EXACTLY valid JSON and nothing else.\n\n"
      f"FIELDS:\n{field_lines}\n\n"
      "For each field:\n"
      "- if absent, return null.\n"
      "- string: return a short human-readable string.\n"
      "- array: return a JSON array (possibly empty).\n"
      "- object: return a JSON object or null.\n"
      "- number/boolean: return appropriate JSON types.\n\n"
      f'Also include for each field an optional "{CONFIDENCE_KEY_PREFIX}'
      '<fieldId>" numeric value between 0.0 and 1.0 representing your'
      " confidence (if you can estimate), otherwise you may omit it.\n\n"
      f'CHUNK:\n"""{window.text}"""\n'
  )


def _compact(parsed: Mapping[str, Any]) -> dict[str, Any]:
  """Non-null fields of a window result, with long arrays truncated."""
  out = {}
  for key, value in parsed.items():
    if value is None:
      continue
    if isinstance(value, list):
      value = value[:MAX_REDUCTION_ARRAY_ITEMS]
    out[key] = value
  return out


def reduction_prompt(
    window_results: Sequence[data.WindowResult],
    schema: schema_lib.ObjectNode,
) -> str:
  """Builds the instructions that merge all window results into one object.

  Args:
    window_results: Normalized results, already sorted by window id.
    schema: Root schema the merged object should follow.

  Returns:
    Prompt text embedding the schema and every window's non-null fields.
  """
  schema_json = json.dumps(schema.to_dict(), indent=2, ensure_ascii=False)
  parts = [
      f"{REDUCER_PREAMBLE} Given the SCHEMA and the per-chunk extraction"
      " results, produce the final JSON object that conforms to the SCHEMA."
      " Return EXACTLY valid JSON and nothing else.\n\n",
      f"SCHEMA (JSON Schema-like, target shape):\n{schema_json}\n\n",
      "CHUNK RESULTS (only non-null fields shown):\n",
  ]
  for position, result in enumerate(window_results, start=1):
    compacted = json.dumps(
        _compact(result.parsed), indent=2, ensure_ascii=False
    )
    parts.append(
        f"\nChunk {position} (ID: {result.window_id}):\n{compacted}\n"
    )
  parts.append(
      "\nINSTRUCTIONS:\n"
      "- Produce a single JSON object that matches the SCHEMA.\n"
      "- Merge information from all chunks.\n"
      "- Arrays: deduplicate semantically; if items are objects, prefer"
      " merging by keys like id/text/task/action/name/title when present.\n"
      "- Strings: produce concise summaries without duplicates.\n"
      "- Objects: merge properties; prefer most recent or most specific info"
      " when conflicts arise.\n"
      "- If a field is absent in all chunks, either omit it or set it to"
      " null.\n"
      "- Output ONLY the final JSON object; no commentary."
  )
  return "".join(parts)
