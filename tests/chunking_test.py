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

import textwrap

from absl.testing import absltest
from absl.testing import parameterized

from intext import chunking
from intext import exceptions
from intext import tokenizer

_MEETING = (
    "This is CHUNK1 with some details.\nAnd here is CHUNK2 with other details."
)


class BuildWindowsTest(parameterized.TestCase):

  def test_two_chunk_document(self):
    windows = chunking.build_windows(
        _MEETING, window_tokens=5, overlap_tokens=0
    )
    self.assertEqual(
        [w.text for w in windows],
        [
            "This is CHUNK1 with",
            "some details.\nAnd here",
            "is CHUNK2 with other",
            "details.",
        ],
    )
    self.assertEqual([w.window_id for w in windows], [0, 1, 2, 3])
    self.assertEqual(windows[0].tokens, ("This", "is", "CHUNK", "1", "with"))
    self.assertEqual(
        windows[3].token_interval, tokenizer.TokenInterval(15, 17)
    )

  def test_overlapping_windows(self):
    windows = chunking.build_windows(
        "a b c d e f g", window_tokens=3, overlap_tokens=1
    )
    self.assertEqual(
        [w.text for w in windows], ["a b c", "c d e", "e f g", "g"]
    )

  @parameterized.named_parameters(
      dict(testcase_name="overlap_equals_window", overlap_tokens=2),
      dict(testcase_name="overlap_exceeds_window", overlap_tokens=5),
  )
  def test_degenerate_overlap_advances_one_token(self, overlap_tokens):
    windows = chunking.build_windows(
        "a b c", window_tokens=2, overlap_tokens=overlap_tokens
    )
    self.assertEqual([w.text for w in windows], ["a b", "b c", "c"])
    self.assertEqual([w.window_id for w in windows], [0, 1, 2])

  @parameterized.named_parameters(
      dict(testcase_name="empty", text=""),
      dict(testcase_name="whitespace", text="  \n\t  "),
  )
  def test_no_tokens_no_windows(self, text):
    self.assertEqual(chunking.build_windows(text), [])

  def test_short_document_is_one_window(self):
    windows = chunking.build_windows("  Short note.  ")
    self.assertLen(windows, 1)
    self.assertEqual(windows[0].text, "Short note.")
    self.assertEqual((windows[0].start_char, windows[0].end_char), (2, 13))

  def test_windows_cover_document_without_gaps(self):
    text = textwrap.dedent("""\
        Alice opened the meeting at 9:30. Bob reported that the migration
        finished, but two services still read from the old cluster.

        Carol will file tickets; Dan owns the rollback plan (due Friday).
        """) * 4
    windows = chunking.build_windows(text, window_tokens=7, overlap_tokens=2)

    tokens = tokenizer.tokenize(text).tokens
    self.assertEqual(windows[0].start_char, tokens[0].char_interval.start_pos)
    self.assertEqual(windows[-1].end_char, tokens[-1].char_interval.end_pos)
    for window in windows:
      self.assertBetween(window.start_char, 0, len(text))
      self.assertBetween(window.end_char, window.start_char, len(text))
      self.assertEqual(
          text[window.start_char : window.end_char], window.text
      )
      self.assertLessEqual(len(window.tokens), 7)
    for previous, current in zip(windows, windows[1:]):
      self.assertLessEqual(current.start_char, previous.end_char)
      self.assertEqual(current.window_id, previous.window_id + 1)
      self.assertEqual(
          current.token_interval.start_index,
          previous.token_interval.start_index + 5,
      )

  def test_custom_tokenizer(self):
    windows = chunking.build_windows(
        "Hello,  world again", window_tokens=2, overlap_tokens=0,
        tokenizer=str.split,
    )
    self.assertEqual([w.text for w in windows], ["Hello,  world", "again"])
    self.assertEqual(windows[0].tokens, ("Hello,", "world"))

  def test_unfaithful_tokenizer_still_terminates(self):
    windows = chunking.build_windows(
        "ab cd",
        window_tokens=5,
        overlap_tokens=0,
        tokenizer=lambda text: text.upper().split(),
    )
    self.assertLen(windows, 1)
    self.assertEqual((windows[0].start_char, windows[0].end_char), (0, 4))
    self.assertEqual(windows[0].tokens, ("AB", "CD"))

  @parameterized.named_parameters(
      dict(testcase_name="zero_window", window_tokens=0, overlap_tokens=0),
      dict(testcase_name="negative_overlap", window_tokens=5, overlap_tokens=-1),
  )
  def test_invalid_sizes_raise(self, window_tokens, overlap_tokens):
    with self.assertRaises(exceptions.ConfigError):
      chunking.build_windows("some text", window_tokens, overlap_tokens)


class WindowIteratorTest(absltest.TestCase):

  def test_iterator_matches_build_windows(self):
    iterator = chunking.WindowIterator(
        _MEETING, window_tokens=4, overlap_tokens=1
    )
    self.assertEqual(iterator.token_count, 17)
    self.assertEqual(
        list(iterator),
        chunking.build_windows(_MEETING, window_tokens=4, overlap_tokens=1),
    )

  def test_window_step(self):
    self.assertEqual(chunking.window_step(1500, 300), 1200)
    self.assertEqual(chunking.window_step(3, 3), 1)
    self.assertEqual(chunking.window_step(3, 10), 1)


if __name__ == "__main__":
  absltest.main()
