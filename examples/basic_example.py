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

"""Extracts a dispute summary and action items from a short exchange."""

from __future__ import annotations

import asyncio
import json

import shared

SCHEMA = {
    "type": "object",
    "properties": {
        "issue": {
            "type": "string",
            "description": "one-sentence summary of the core dispute",
        },
        "next_moves": {
            "type": "array",
            "description": "list of actions with task and due date",
            "items": {
                "type": "object",
                "properties": {
                    "task": {"type": "string"},
                    "due": {"type": "string"},
                },
            },
        },
    },
}

TEXT = """
Participant A: I think we should delay payment until milestone 2.
Participant B: No, we need to keep the original payment schedule otherwise cashflow suffers.
Action: Finance to send invoice and confirm dates. Owner: Finance, Due: 2025-09-10.
"""


async def main() -> None:
  extractor = shared.create_intext_instance()
  result = await extractor.extract(
      TEXT,
      schema=SCHEMA,
      window_tokens=50,
      overlap_tokens=10,
      concurrency=2,
      debug=True,
  )
  print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
  asyncio.run(main())
