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

"""Library for breaking documents into overlapping token windows.

A window covers at most `window_tokens` consecutive tokens. Consecutive windows
start `max(1, window_tokens - overlap_tokens)` tokens apart, so they share
`overlap_tokens` tokens when the overlap is smaller than the window and still
move forward by one token when it is not.
"""

from __future__ import annotations

from collections.abc import Iterator
import dataclasses

from absl import logging

from intext import exceptions
from intext import tokenizer as tokenizer_lib

DEFAULT_WINDOW_TOKENS = 1500
DEFAULT_OVERLAP_TOKENS = 300


@dataclasses.dataclass(frozen=True)
class Window:
  """A contiguous run of tokens submitted as one extraction unit.

  Attributes:
    window_id: 0-based position of the window in document order.
    text: Source text from the first token's start to the last token's end.
    start_char: Start offset of `text` in the document (inclusive).
    end_char: End offset of `text` in the document (exclusive).
    tokens: The token strings covered by the window.
    token_interval: The covered tokens as [start_index, end_index).
  """

  window_id: int
  text: str
  start_char: int
  end_char: int
  tokens: tuple[str, ...]
  token_interval: tokenizer_lib.TokenInterval


def window_step(window_tokens: int, overlap_tokens: int) -> int:
  """Number of tokens between the starts of consecutive windows."""
  return max(1, window_tokens - overlap_tokens)


class WindowIterator:
  """Iterator yielding the windows of one document in order."""

  def __init__(
      self,
      text: str,
      window_tokens: int = DEFAULT_WINDOW_TOKENS,
      overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
      tokenizer: tokenizer_lib.Tokenizer | None = None,
  ):
    """Tokenizes `text` once and prepares to walk it.

    Args:
      text: The document to split.
      window_tokens: Maximum tokens per window.
      overlap_tokens: Tokens shared by consecutive windows.
      tokenizer: Callable returning the document's token strings. Defaults to
        `tokenizer.default_tokenizer`.

    Raises:
      ConfigError: If `window_tokens` < 1 or `overlap_tokens` < 0.
    """
    if window_tokens < 1:
      raise exceptions.ConfigError(
          f"window_tokens must be >= 1, got {window_tokens}"
      )
    if overlap_tokens < 0:
      raise exceptions.ConfigError(
          f"overlap_tokens must be >= 0, got {overlap_tokens}"
      )
    tokenize = tokenizer or tokenizer_lib.default_tokenizer
    self._text = text
    self._window_tokens = window_tokens
    self._step = window_step(window_tokens, overlap_tokens)
    self._tokens = tokenizer_lib.align_tokens(text, tokenize(text))
    self._cursor = 0
    self._next_id = 0

  @property
  def token_count(self) -> int:
    return len(self._tokens)

  def __iter__(self) -> Iterator[Window]:
    return self

  def __next__(self) -> Window:
    if self._cursor >= len(self._tokens):
      raise StopIteration

    token_interval = tokenizer_lib.TokenInterval(
        start_index=self._cursor,
        end_index=min(self._cursor + self._window_tokens, len(self._tokens)),
    )
    covered = self._tokens[token_interval.start_index : token_interval.end_index]
    window = Window(
        window_id=self._next_id,
        text=tokenizer_lib.interval_text(
            self._text, self._tokens, token_interval
        ),
        start_char=covered[0].char_interval.start_pos,
        end_char=covered[-1].char_interval.end_pos,
        tokens=tuple(token.text for token in covered),
        token_interval=token_interval,
    )
    self._next_id += 1
    self._cursor += self._step
    return window


def build_windows(
    text: str,
    window_tokens: int = DEFAULT_WINDOW_TOKENS,
    overlap_tokens: int = DEFAULT_OVERLAP_TOKENS,
    tokenizer: tokenizer_lib.Tokenizer | None = None,
) -> list[Window]:
  """Splits `text` into overlapping token windows.

  Args:
    text: The document to split.
    window_tokens: Maximum tokens per window.
    overlap_tokens: Tokens shared by consecutive windows.
    tokenizer: Optional custom tokenizer, see `WindowIterator`.

  Returns:
    Windows in document order with ids 0..n-1. An empty or all-whitespace
    document yields no windows.
  """
  iterator = WindowIterator(text, window_tokens, overlap_tokens, tokenizer)
  windows = list(iterator)
  logging.debug(
      "Built %d windows from %d tokens (window=%d, overlap=%d).",
      len(windows),
      iterator.token_count,
      window_tokens,
      overlap_tokens,
  )
  return windows
