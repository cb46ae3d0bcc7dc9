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

"""Classes used to represent extraction results."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import dataclasses
from typing import Any


@dataclasses.dataclass(frozen=True)
class WindowResult:
  """Normalized extraction output for one window.

  Attributes:
    window_id: Id of the window this result belongs to.
    parsed: Every top-level schema field mapped to its value, or None when the
      field was absent, undetermined or rejected by normalization.
    raw: The completion text as returned by the service; empty when the call
      failed.
    confidence: Confidence scores in [0, 1] the service reported for declared
      fields via `_confidence_<field>` keys.
  """

  window_id: int
  parsed: Mapping[str, Any]
  raw: str = ""
  confidence: Mapping[str, float] = dataclasses.field(default_factory=dict)

  def has_value(self, field_name: str) -> bool:
    return self.parsed.get(field_name) is not None

  def to_dict(self) -> dict[str, Any]:
    return {
        "window_id": self.window_id,
        "parsed": dict(self.parsed),
        "raw": self.raw,
        "confidence": dict(self.confidence),
    }


@dataclasses.dataclass(frozen=True)
class ProvenanceEntry:
  """Ids of the windows that produced a non-null value for one field."""

  source_windows: tuple[int, ...] = ()


@dataclasses.dataclass(frozen=True)
class ExtractMetadata:
  window_count: int
  provenance: Mapping[str, ProvenanceEntry]
  window_results: Sequence[WindowResult]


@dataclasses.dataclass(frozen=True)
class ExtractResult:
  """Output of one `Intext.extract` call.

  Attributes:
    json: The merged object produced by the reduction step. Its shape follows
      the schema on a best-effort basis; it is `{}` when reduction failed.
    metadata: Window count, per-field provenance and every window result in
      window order.
  """

  json: Mapping[str, Any]
  metadata: ExtractMetadata

  def to_dict(self) -> dict[str, Any]:
    """Plain, JSON-serializable form of the result."""
    return {
        "json": dict(self.json),
        "metadata": {
            "window_count": self.metadata.window_count,
            "provenance": {
                field_name: {"source_windows": list(entry.source_windows)}
                for field_name, entry in self.metadata.provenance.items()
            },
            "window_results": [
                result.to_dict() for result in self.metadata.window_results
            ],
        },
    }
