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

"""Final reduction of window results into one object.

All merge semantics live in the reduction prompt; nothing is merged here. When
the service fails or answers with anything other than a JSON object the final
object is `{}`, unlike a failed window, which keeps its declared fields as
None.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from absl import logging

from intext import completion
from intext import data
from intext import orchestrator
from intext import prompting
from intext import resolver
from intext import schema as schema_lib


async def reduce(
    window_results: Sequence[data.WindowResult],
    schema: schema_lib.ObjectNode,
    completion_call: completion.CompletionCall,
    build_request: orchestrator.RequestBuilder,
    debug: bool = False,
) -> dict[str, Any]:
  """Issues the single reduction call and parses its answer.

  Args:
    window_results: Normalized window results sorted by window id.
    schema: Root schema.
    completion_call: Async function sending one request body.
    build_request: Turns prompt text into a request body.
    debug: Emit the prompt and response at INFO level.

  Returns:
    The merged object, or `{}` when the call fails or its output is not an
    object.
  """
  prompt = prompting.reduction_prompt(window_results, schema)
  body = build_request(prompt)
  orchestrator.debug_log(
      debug,
      "Sending final reduction request with %d chunk results",
      len(window_results),
  )
  orchestrator.debug_log(debug, "Final reduction prompt:\n%s\n", prompt)

  try:
    response = await completion_call(body)
    raw = completion.response_text(response)
  except Exception as e:  # pylint: disable=broad-exception-caught
    logging.warning("Final reduction call failed; returning {}: %s", e)
    return {}

  orchestrator.debug_log(
      debug, "Received final reduction response:\n%s\n", raw
  )
  parsed = resolver.parse_json_object(raw) if raw else None
  if parsed is None:
    logging.warning(
        "Final reduction did not return a JSON object; returning {}."
    )
    return {}
  return parsed
