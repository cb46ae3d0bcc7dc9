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

import asyncio
import collections
import json

from absl.testing import absltest
from absl.testing import parameterized

from intext import chunking
from intext import completion
from intext import orchestrator
from intext import schema

_SCHEMA = schema.root_schema({
    "type": "object",
    "properties": {"word": {"type": "string"}},
})

_WORDS = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]


def _build_request(prompt):
  return completion.build_request(prompt, {"model": "test-model"})


def _window_word(body):
  content = body["messages"][0]["content"]
  return next(word for word in _WORDS if f'"""{word}"""' in content)


class FakeService:
  """Echoes each window's word back after a per-word delay."""

  def __init__(self, delays=None, failing=(), garbage=()):
    self.delays = delays or {}
    self.failing = set(failing)
    self.garbage = set(garbage)
    self.calls = collections.Counter()
    self.completed = []
    self.in_flight = 0
    self.max_in_flight = 0

  async def __call__(self, body):
    word = _window_word(body)
    self.calls[word] += 1
    self.in_flight += 1
    self.max_in_flight = max(self.max_in_flight, self.in_flight)
    try:
      await asyncio.sleep(self.delays.get(word, 0))
      if word in self.failing:
        raise RuntimeError(f"service unavailable for {word}")
      content = "no JSON here" if word in self.garbage else json.dumps(
          {"word": word}
      )
      self.completed.append(word)
      return {"choices": [{"message": {"content": content}}]}
    finally:
      self.in_flight -= 1


def _windows():
  return chunking.build_windows(
      " ".join(_WORDS), window_tokens=1, overlap_tokens=0
  )


def _run(service, concurrency=3, debug=False):
  return asyncio.run(
      orchestrator.run_extraction(
          _windows(),
          _SCHEMA,
          completion.as_completion_call(service),
          _build_request,
          concurrency=concurrency,
          debug=debug,
      )
  )


class RunExtractionTest(parameterized.TestCase):

  def test_results_sorted_despite_completion_order(self):
    delays = {word: 0.01 * (len(_WORDS) - i) for i, word in enumerate(_WORDS)}
    service = FakeService(delays=delays)

    results = _run(service, concurrency=len(_WORDS))

    self.assertNotEqual(service.completed, _WORDS)
    self.assertEqual([r.window_id for r in results], list(range(len(_WORDS))))
    self.assertEqual([r.parsed["word"] for r in results], _WORDS)

  @parameterized.named_parameters(
      dict(testcase_name="one", concurrency=1, expected=1),
      dict(testcase_name="two", concurrency=2, expected=2),
      dict(testcase_name="zero_means_one", concurrency=0, expected=1),
      dict(testcase_name="negative_means_one", concurrency=-4, expected=1),
      dict(testcase_name="capped_by_windows", concurrency=50, expected=6),
  )
  def test_concurrency_cap(self, concurrency, expected):
    service = FakeService(delays={word: 0.005 for word in _WORDS})
    _run(service, concurrency=concurrency)
    self.assertEqual(service.max_in_flight, expected)

  def test_each_window_called_exactly_once(self):
    service = FakeService(delays={"alpha": 0.02, "delta": 0.01})
    results = _run(service, concurrency=4)
    self.assertLen(results, len(_WORDS))
    self.assertEqual(service.calls, collections.Counter(_WORDS))

  def test_failed_window_is_null_and_siblings_survive(self):
    service = FakeService(failing=["charlie"], garbage=["echo"])

    results = _run(service)

    self.assertEqual(
        [r.parsed["word"] for r in results],
        ["alpha", "bravo", None, "delta", None, "foxtrot"],
    )
    self.assertEqual(results[2].raw, "")
    self.assertEqual(results[4].raw, "no JSON here")

  def test_debug_does_not_change_results(self):
    quiet = _run(FakeService())
    verbose = _run(FakeService(), debug=True)
    self.assertEqual(quiet, verbose)

  def test_no_windows_no_calls(self):
    service = FakeService()
    results = asyncio.run(
        orchestrator.run_extraction(
            [],
            _SCHEMA,
            completion.as_completion_call(service),
            _build_request,
        )
    )
    self.assertEqual(results, [])
    self.assertEmpty(service.calls)


class WorkerCountTest(parameterized.TestCase):

  @parameterized.parameters(
      (3, 10, 3),
      (3, 2, 2),
      (0, 5, 1),
      (3, 0, 1),
  )
  def test_worker_count(self, concurrency, window_count, expected):
    self.assertEqual(
        orchestrator.worker_count(concurrency, window_count), expected
    )


if __name__ == "__main__":
  absltest.main()
