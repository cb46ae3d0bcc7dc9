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

"""Adapter around the caller's completion service.

The service is opaque: any OpenAI-compatible client exposing
`chat.completions.create(**body)`, or any callable taking the request body.
Either may be synchronous or return an awaitable. This module builds request
bodies and reads the message text out of responses; it never talks to the
network itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
import inspect
from typing import Any, Protocol

from intext import exceptions

CompletionCall = Callable[[dict[str, Any]], Awaitable[Any]]

PACKAGE_DEFAULT_PARAMS: Mapping[str, Any] = {"stream": False}
DEFAULT_RESPONSE_FORMAT: Mapping[str, Any] = {"type": "json_object"}


class _Completions(Protocol):

  def create(self, **kwargs: Any) -> Any:
    ...


class _Chat(Protocol):
  completions: _Completions


class OpenAICompatibleClient(Protocol):
  """Anything shaped like `openai.OpenAI` or `openai.AsyncOpenAI`."""

  chat: _Chat


def build_request(
    prompt: str,
    client_params: Mapping[str, Any],
    default_request_params: Mapping[str, Any] | None = None,
    call_options: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
  """Layers request parameters for one completion call.

  Precedence, lowest first: package defaults merged with
  `default_request_params`, then `client_params`, then `call_options`. The
  model and the single user message are always set last, and a JSON
  `response_format` is added unless some layer already chose one.

  Args:
    prompt: Instruction text sent as the only message.
    client_params: Per-instance parameters; must contain "model".
    default_request_params: Per-instance defaults below `client_params`.
    call_options: Per-call overrides.

  Returns:
    The request body.
  """
  body: dict[str, Any] = {
      **PACKAGE_DEFAULT_PARAMS,
      **(default_request_params or {}),
      **client_params,
      **(call_options or {}),
      "model": client_params["model"],
      "messages": [{"role": "user", "content": prompt}],
  }
  if not body.get("response_format"):
    body["response_format"] = dict(DEFAULT_RESPONSE_FORMAT)
  return body


def _field(obj: Any, name: str) -> Any:
  if isinstance(obj, Mapping):
    return obj.get(name)
  return getattr(obj, name, None)


def response_text(response: Any) -> str:
  """Returns `choices[0].message.content`, or "" when it is missing.

  Works with plain mappings and with SDK response objects.

  Raises:
    CompletionError: If content is present but is not a string.
  """
  choices = _field(response, "choices")
  if not choices:
    return ""
  message = _field(choices[0], "message")
  content = _field(message, "content") if message is not None else None
  if content is None:
    return ""
  if not isinstance(content, str):
    raise exceptions.CompletionError(
        f"Completion content must be a string, got {type(content).__name__}."
    )
  return content


def as_completion_call(
    client: OpenAICompatibleClient | Callable[..., Any],
) -> CompletionCall:
  """Wraps a client or callable as an async `body -> response` function.

  Raises:
    ConfigError: If `client` is neither callable nor OpenAI-compatible.
  """
  chat = getattr(client, "chat", None)
  completions = getattr(chat, "completions", None)
  if completions is not None and callable(getattr(completions, "create", None)):
    invoke = lambda body: completions.create(**body)
  elif callable(client):
    invoke = client
  else:
    raise exceptions.ConfigError(
        "client must expose chat.completions.create or be callable."
    )

  async def call(body: dict[str, Any]) -> Any:
    response = invoke(body)
    if inspect.isawaitable(response):
      response = await response
    return response

  return call
