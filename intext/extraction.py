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

"""Main extraction API for intext.

Example:
  >>> client = openai.AsyncOpenAI()
  >>> intext = create_intext(client, {"model": "gpt-4o-mini", "temperature": 0})
  >>> result = await intext.extract(transcript, schema=schema)
  >>> result.json, result.metadata.provenance
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping, Sequence
import functools
from typing import Any

from intext import chunking
from intext import completion
from intext import data
from intext import exceptions
from intext import orchestrator
from intext import provenance
from intext import reducer
from intext import schema as schema_lib


class Intext:
  """Extracts schema-shaped data from long documents.

  The completion client and its parameters are fixed at construction and
  shared, read-only, by every `extract` call. Calls are otherwise
  independent.
  """

  def __init__(
      self,
      client: completion.OpenAICompatibleClient | Callable[..., Any],
      client_params: Mapping[str, Any],
      default_request_params: Mapping[str, Any] | None = None,
  ):
    """Initializes the extractor.

    Args:
      client: OpenAI-compatible client (sync or async), or a callable taking
        the request body and returning the response.
      client_params: Preferred request parameters; must include "model".
      default_request_params: Request defaults ranked below `client_params`.

    Raises:
      ConfigError: If the client is unusable or no model is configured.
    """
    if not client_params or not client_params.get("model"):
      raise exceptions.ConfigError("client_params must include a 'model'.")
    self._completion_call = completion.as_completion_call(client)
    self._client_params = dict(client_params)
    self._default_request_params = dict(default_request_params or {})

  @property
  def model(self) -> str:
    return self._client_params["model"]

  def extract(
      self,
      text: str,
      *,
      schema: Mapping[str, Any] | schema_lib.ObjectNode | None = None,
      window_tokens: int = chunking.DEFAULT_WINDOW_TOKENS,
      overlap_tokens: int = chunking.DEFAULT_OVERLAP_TOKENS,
      concurrency: int = orchestrator.DEFAULT_CONCURRENCY,
      tokenizer: Callable[[str], Sequence[str]] | None = None,
      llm_call_options: Mapping[str, Any] | None = None,
      debug: bool = False,
  ) -> Coroutine[Any, Any, data.ExtractResult]:
    """Extracts structured data from `text`.

    Arguments are validated and the document is split into windows before
    this method returns, so configuration errors raise immediately, before
    any completion call. The returned coroutine performs the calls.

    Args:
      text: The document.
      schema: Root object schema, as an ObjectNode or its dictionary form.
      window_tokens: Tokens per window.
      overlap_tokens: Tokens shared by consecutive windows.
      concurrency: Maximum simultaneous window calls.
      tokenizer: Optional replacement for the default tokenizer.
      llm_call_options: Per-call request overrides.
      debug: Log progress, prompts and results at INFO level, raising absl
        verbosity to INFO when it is lower.

    Returns:
      A coroutine resolving to the ExtractResult.

    Raises:
      SchemaError: If the schema is missing or malformed.
      ConfigError: If the text or window sizes are invalid.
    """
    root = schema_lib.root_schema(schema)
    if not isinstance(text, str):
      raise exceptions.ConfigError(
          f"text must be a string, got {type(text).__name__}."
      )
    if debug:
      orchestrator.enable_debug_output()
    orchestrator.debug_log(
        debug,
        "Starting extraction with %d chunk tokens, %d overlap tokens, and %d"
        " concurrency",
        window_tokens,
        overlap_tokens,
        concurrency,
    )
    windows = chunking.build_windows(
        text, window_tokens, overlap_tokens, tokenizer
    )
    orchestrator.debug_log(debug, "Built %d chunks", len(windows))
    return self._run(windows, root, concurrency, llm_call_options, debug)

  def extract_sync(self, text: str, **kwargs: Any) -> data.ExtractResult:
    """Runs `extract` to completion on a fresh event loop."""
    return asyncio.run(self.extract(text, **kwargs))

  async def _run(
      self,
      windows: list[chunking.Window],
      schema: schema_lib.ObjectNode,
      concurrency: int,
      llm_call_options: Mapping[str, Any] | None,
      debug: bool,
  ) -> data.ExtractResult:
    build_request = functools.partial(
        completion.build_request,
        client_params=self._client_params,
        default_request_params=self._default_request_params,
        call_options=llm_call_options,
    )
    window_results = await orchestrator.run_extraction(
        windows,
        schema,
        self._completion_call,
        build_request,
        concurrency=concurrency,
        debug=debug,
    )
    final_json = await reducer.reduce(
        window_results, schema, self._completion_call, build_request, debug
    )
    orchestrator.debug_log(
        debug, "Extraction complete. Final result: %s", final_json
    )
    return data.ExtractResult(
        json=final_json,
        metadata=data.ExtractMetadata(
            window_count=len(windows),
            provenance=provenance.build_provenance(window_results, schema),
            window_results=tuple(window_results),
        ),
    )


def create_intext(
    client: completion.OpenAICompatibleClient | Callable[..., Any],
    client_params: Mapping[str, Any],
    default_request_params: Mapping[str, Any] | None = None,
) -> Intext:
  """Factory form of the `Intext` constructor."""
  return Intext(client, client_params, default_request_params)
