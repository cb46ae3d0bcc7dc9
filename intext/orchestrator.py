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

"""Concurrent per-window extraction.

A fixed pool of worker coroutines shares one claim counter. Each worker takes
the next unclaimed window index until none remain, so a slow window never holds
up the others. A failing or unparsable call only nulls out its own window.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
import itertools
from typing import Any

from absl import logging

from intext import chunking
from intext import completion
from intext import data
from intext import prompting
from intext import resolver
from intext import schema as schema_lib

DEFAULT_CONCURRENCY = 3

# Builds a request body from prompt text.
RequestBuilder = Callable[[str], dict[str, Any]]


def debug_log(enabled: bool, message: str, *args: Any) -> None:
  """Logs progress at INFO when debug output is enabled, else at DEBUG."""
  if enabled:
    logging.info("[intext debug] " + message, *args)
  else:
    logging.debug(message, *args)


def enable_debug_output() -> None:
  """Makes INFO lines visible when absl verbosity or handlers hide them."""
  if logging.get_verbosity() < logging.INFO:
    logging.set_verbosity(logging.INFO)
  logging.use_absl_handler()


def worker_count(concurrency: int, window_count: int) -> int:
  return max(1, min(concurrency, window_count))


async def extract_window(
    window: chunking.Window,
    schema: schema_lib.ObjectNode,
    completion_call: completion.CompletionCall,
    build_request: RequestBuilder,
    debug: bool = False,
) -> data.WindowResult:
  """Runs one extraction call and normalizes its output.

  Never raises for service errors: a failed call or unusable response yields
  an all-null result for the window.
  """
  body = build_request(prompting.per_window_prompt(window, schema))
  raw = ""
  try:
    debug_log(
        debug,
        "Sending request for chunk %d with model %s",
        window.window_id,
        body.get("model"),
    )
    response = await completion_call(body)
    raw = completion.response_text(response)
    debug_log(
        debug,
        "Received response for chunk %d (%d characters)",
        window.window_id,
        len(raw),
    )
  except Exception as e:  # pylint: disable=broad-exception-caught
    logging.warning(
        "Completion call for chunk %d failed; using null fields: %s",
        window.window_id,
        e,
    )
    raw = ""

  parsed = resolver.parse_json_object(raw) if raw else None
  if raw and parsed is None:
    logging.warning(
        "Chunk %d returned unparsable output; using null fields.",
        window.window_id,
    )
  result = resolver.normalize_window_result(
      window.window_id, raw, parsed, schema
  )
  debug_log(
      debug, "Normalized chunk %d: %s", window.window_id, dict(result.parsed)
  )
  return result


async def run_extraction(
    windows: Sequence[chunking.Window],
    schema: schema_lib.ObjectNode,
    completion_call: completion.CompletionCall,
    build_request: RequestBuilder,
    concurrency: int = DEFAULT_CONCURRENCY,
    debug: bool = False,
) -> list[data.WindowResult]:
  """Extracts every window under a concurrency cap.

  Args:
    windows: Windows to process, ids matching their positions.
    schema: Root schema.
    completion_call: Async function sending one request body.
    build_request: Turns prompt text into a request body.
    concurrency: Maximum simultaneous calls; values below 1 mean 1.
    debug: Emit progress lines at INFO level.

  Returns:
    One WindowResult per window, sorted by window id.
  """
  if not windows:
    return []

  claims = itertools.count()
  results: list[data.WindowResult] = []

  async def worker() -> None:
    while True:
      index = next(claims)
      if index >= len(windows):
        return
      debug_log(debug, "Processing chunk %d", windows[index].window_id)
      results.append(
          await extract_window(
              windows[index], schema, completion_call, build_request, debug
          )
      )

  workers = worker_count(concurrency, len(windows))
  debug_log(debug, "Spawning %d workers for processing", workers)
  await asyncio.gather(*(worker() for _ in range(workers)))

  results.sort(key=lambda result: result.window_id)
  return results
