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

"""Extracts disputes, action items and status from a meeting transcript.

Usage:
  python examples/meeting_analysis.py [path/to/transcript.txt]

Defaults to examples/meeting_transcript.txt.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
import sys
from typing import Any

import shared

DEFAULT_TRANSCRIPT = Path(__file__).parent / "meeting_transcript.txt"

SCHEMA = {
    "type": "object",
    "properties": {
        "issues_of_dispute": {
            "type": "array",
            "description": (
                "technical disagreements, resource allocation conflicts, or"
                " timeline disputes mentioned in the meeting"
            ),
            "items": {
                "type": "object",
                "properties": {"text": {"type": "string"}},
            },
        },
        "next_moves": {
            "type": "array",
            "description": (
                "specific action items with owners and deadlines mentioned in"
                " the meeting"
            ),
            "items": {
                "type": "object",
                "properties": {"text": {"type": "string"}},
            },
        },
        "team_members_involved": {
            "type": "array",
            "description": (
                "names and roles of team members participating in the"
                " discussion"
            ),
            "items": {
                "type": "object",
                "properties": {"name": {"type": "string"}},
            },
        },
        "timeline_impact": {
            "type": "string",
            "description": (
                "summary of how disputes affect project timeline and deadlines"
            ),
        },
        "project_status": {
            "type": "string",
            "description": "overall health of the project as decided in the meeting",
            "enum": ["on_track", "at_risk", "blocked"],
        },
    },
}


def _item_text(item: Any, *keys: str) -> str:
  if isinstance(item, str):
    return item
  if isinstance(item, dict):
    for key in keys:
      if item.get(key):
        return str(item[key])
  return json.dumps(item, ensure_ascii=False)


def _print_section(title: str, items: Any, *keys: str) -> None:
  print(f"\n=== {title} ===")
  if not isinstance(items, list) or not items:
    print(f"No {title.lower()} identified")
    return
  for index, item in enumerate(items, start=1):
    print(f"{index}. {_item_text(item, *keys)}")


async def main(transcript_path: Path) -> None:
  try:
    transcript = transcript_path.read_text(encoding="utf-8")
  except OSError as e:
    print(f"FATAL: could not read transcript {transcript_path}: {e}",
          file=sys.stderr)
    sys.exit(1)

  extractor = shared.create_intext_instance()
  print("Extracting information from meeting transcript...")
  result = await extractor.extract(
      transcript,
      schema=SCHEMA,
      window_tokens=500,
      overlap_tokens=50,
      concurrency=8,
      debug=True,
  )

  print("\n=== Extracted Information ===")
  print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

  final = result.json
  _print_section("Issues of Dispute", final.get("issues_of_dispute"), "text")
  _print_section(
      "Next Moves", final.get("next_moves"), "text", "task", "action"
  )
  _print_section(
      "Team Members Involved", final.get("team_members_involved"), "name"
  )
  print("\n=== Timeline Impact ===")
  print(final.get("timeline_impact") or "No timeline impact identified")
  print("\n=== Project Status ===")
  print(final.get("project_status") or "No status recorded")

  print("\n=== Provenance ===")
  for field_name, entry in result.metadata.provenance.items():
    print(f"{field_name}: windows {list(entry.source_windows)}")


if __name__ == "__main__":
  path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_TRANSCRIPT
  asyncio.run(main(path))
