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

"""Text tokenization utilities with character position tracking.

Tokens here approximate language-model tokens: they are only used to size
windows, so the segmentation favours being cheap and predictable over matching
any particular model vocabulary.

Tokenization Behavior:
  - Words: Consecutive letters group together ("hello" -> 1 token)
  - Numbers: Consecutive digits group together ("123" -> 1 token)
  - Punctuation: Consecutive symbols group together ("?!" -> 1 token)
  - Slash abbreviations stay whole ("mg/kg" -> 1 token)
  - Underscores and lone slashes are single punctuation tokens
  - CJK text: each character is a separate token
  - Whitespace never produces a token

Example:
  >>> default_tokenizer("Hello, world! test_123")
  ['Hello', ',', 'world', '!', 'test', '_', '123']

Any callable mapping text to an ordered sequence of token strings can stand in
for `default_tokenizer`; `align_tokens` maps such output back onto the source.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import dataclasses
import enum

from absl import logging
import regex

from intext import exceptions

Tokenizer = Callable[[str], Sequence[str]]


class InvalidTokenIntervalError(exceptions.IntextError):
  """Error raised when a token interval is invalid or out of range."""


@dataclasses.dataclass(frozen=True, slots=True)
class CharInterval:
  """Represents a range of character positions in the original text.

  Attributes:
    start_pos: The starting character index (inclusive).
    end_pos: The ending character index (exclusive).
  """

  start_pos: int
  end_pos: int


@dataclasses.dataclass(frozen=True)
class TokenInterval:
  """An interval over tokens, [start_index, end_index)."""

  start_index: int = 0
  end_index: int = 0


class TokenType(enum.IntEnum):
  """Enumeration of token types produced by `tokenize`."""

  WORD = 0
  NUMBER = 1
  PUNCTUATION = 2
  ACRONYM = 3


@dataclasses.dataclass(frozen=True, slots=True)
class Token:
  """A token and the span of source text it was found at.

  Attributes:
    index: The position of the token in the sequence of tokens.
    text: The token string as produced by the tokenizer.
    char_interval: Where the token sits in the original text.
    token_type: Lexical class, known only for tokens from `tokenize`.
  """

  index: int
  text: str
  char_interval: CharInterval
  token_type: TokenType | None = None


@dataclasses.dataclass(frozen=True)
class TokenizedText:
  """Holds the result of tokenizing a text string."""

  text: str
  tokens: tuple[Token, ...] = ()


_CJK_SCRIPTS = (
    r"\p{Script=Han}\p{Script=Hiragana}\p{Script=Katakana}\p{Script=Hangul}"
)
_SLASH_ABBREV_PATTERN = r"(?:\p{L}+(?:/\p{L}+)+|\p{Nd}+(?:/\p{Nd}+)+)"
_CJK_CHAR_PATTERN = "[" + _CJK_SCRIPTS + "]"
_LETTERS_PATTERN = r"(?:[^\P{L}" + _CJK_SCRIPTS + r"]\p{M}*)+"
_DIGITS_PATTERN = r"\p{Nd}+"
_SYMBOLS_PATTERN = r"[^\p{L}\p{M}\p{Nd}\s_/]+"

_TOKEN_PATTERN = regex.compile(
    "|".join((
        rf"(?P<acronym>{_SLASH_ABBREV_PATTERN})",
        rf"(?P<cjk>{_CJK_CHAR_PATTERN})",
        rf"(?P<word>{_LETTERS_PATTERN})",
        rf"(?P<number>{_DIGITS_PATTERN})",
        rf"(?P<punct>{_SYMBOLS_PATTERN}|[_/])",
        r"(?P<other>\S)",
    )),
    regex.VERSION1 | regex.UNICODE,
)

_GROUP_TYPES = {
    "acronym": TokenType.ACRONYM,
    "cjk": TokenType.WORD,
    "word": TokenType.WORD,
    "number": TokenType.NUMBER,
    "punct": TokenType.PUNCTUATION,
    "other": TokenType.PUNCTUATION,
}


def tokenize(text: str) -> TokenizedText:
  """Splits text into word, number and punctuation tokens with offsets.

  Args:
    text: The text to tokenize.

  Returns:
    A TokenizedText holding every non-whitespace token in document order.
  """
  logging.debug("Entering tokenize() with text length: %d characters", len(text))
  tokens = tuple(
      Token(
          index=index,
          text=match.group(),
          char_interval=CharInterval(*match.span()),
          token_type=_GROUP_TYPES[match.lastgroup],
      )
      for index, match in enumerate(_TOKEN_PATTERN.finditer(text))
  )
  logging.debug("Completed tokenize(). Total tokens: %d", len(tokens))
  return TokenizedText(text=text, tokens=tokens)


def default_tokenizer(text: str) -> list[str]:
  """Returns the token strings of `tokenize`, whitespace excluded."""
  return [token.text for token in tokenize(text).tokens]


def align_tokens(text: str, token_strings: Sequence[str]) -> list[Token]:
  """Locates each token string in `text`, left to right.

  Each token is searched for starting at the end of the previous one. A token
  that cannot be found verbatim (e.g. produced by a tokenizer that normalizes
  its output) is placed at the search cursor and the cursor moves forward by
  the token's length, so alignment always makes progress.

  Args:
    text: The source document.
    token_strings: Tokenizer output for `text`, in order.

  Returns:
    One Token per input string, with character intervals into `text`.
  """
  tokens = []
  cursor = 0
  for index, token_text in enumerate(token_strings):
    found = text.find(token_text, cursor)
    if found == -1:
      logging.debug(
          "Token %d (%r) not found after position %d; approximating offsets.",
          index,
          token_text[:40],
          cursor,
      )
      start = min(cursor, len(text))
      end = min(cursor + len(token_text), len(text))
      cursor += len(token_text)
    else:
      start = found
      end = found + len(token_text)
      cursor = end
    tokens.append(
        Token(
            index=index,
            text=token_text,
            char_interval=CharInterval(start_pos=start, end_pos=end),
        )
    )
  return tokens


def interval_text(
    text: str,
    tokens: Sequence[Token],
    token_interval: TokenInterval,
) -> str:
  """Reconstructs the source substring covered by a token interval.

  Args:
    text: The source document the tokens were aligned against.
    tokens: The aligned tokens.
    token_interval: The interval [start_index, end_index) of tokens.

  Returns:
    The exact substring of `text` from the first token's start to the last
    token's end, including any whitespace between them.

  Raises:
    InvalidTokenIntervalError: If the token_interval is invalid or out of range.
  """
  if (
      token_interval.start_index < 0
      or token_interval.end_index > len(tokens)
      or token_interval.start_index >= token_interval.end_index
  ):
    raise InvalidTokenIntervalError(
        f"Invalid token interval. start_index={token_interval.start_index}, "
        f"end_index={token_interval.end_index}, "
        f"total_tokens={len(tokens)}."
    )

  start_token = tokens[token_interval.start_index]
  end_token = tokens[token_interval.end_index - 1]
  return text[
      start_token.char_interval.start_pos : end_token.char_interval.end_pos
  ]
