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

"""Per-field record of which windows contributed a value."""

from __future__ import annotations

from collections.abc import Sequence

from intext import data
from intext import schema as schema_lib


def build_provenance(
    window_results: Sequence[data.WindowResult],
    schema: schema_lib.ObjectNode,
) -> dict[str, data.ProvenanceEntry]:
  """Maps every top-level schema field to the windows that filled it.

  Reads only the normalized window results, so the reduction output never
  affects provenance.

  Args:
    window_results: Normalized results for every window.
    schema: Root schema.

  Returns:
    For each declared field, the ascending ids of windows whose result holds a
    non-null value for it (possibly empty).
  """
  return {
      field_id: data.ProvenanceEntry(
          source_windows=tuple(
              sorted(
                  result.window_id
                  for result in window_results
                  if result.has_value(field_id)
              )
          )
      )
      for field_id in schema.properties
  }
