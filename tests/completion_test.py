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
import types
from unittest import mock

from absl.testing import absltest
from absl.testing import parameterized

from intext import completion
from intext import exceptions


def _sdk_response(content):
  message = types.SimpleNamespace(role="assistant", content=content)
  return types.SimpleNamespace(
      choices=[types.SimpleNamespace(index=0, message=message)]
  )


class BuildRequestTest(absltest.TestCase):

  def test_minimal_request(self):
    body = completion.build_request("Extract.", {"model": "gpt-4o-mini"})
    self.assertEqual(
        body,
        {
            "stream": False,
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "Extract."}],
            "response_format": {"type": "json_object"},
        },
    )

  def test_layer_precedence(self):
    body = completion.build_request(
        "Extract.",
        client_params={"model": "m1", "temperature": 0, "max_tokens": 100},
        default_request_params={
            "stream": True,
            "temperature": 0.5,
            "top_p": 0.9,
        },
        call_options={
            "temperature": 0.7,
            "model": "m2",
            "messages": [{"role": "system", "content": "ignored"}],
        },
    )

    self.assertEqual(body["model"], "m1")
    self.assertEqual(
        body["messages"], [{"role": "user", "content": "Extract."}]
    )
    self.assertEqual(body["temperature"], 0.7)
    self.assertEqual(body["max_tokens"], 100)
    self.assertEqual(body["top_p"], 0.9)
    self.assertTrue(body["stream"])

  def test_explicit_response_format_is_kept(self):
    schema_format = {"type": "json_schema", "json_schema": {"name": "x"}}
    body = completion.build_request(
        "Extract.",
        {"model": "m"},
        call_options={"response_format": schema_format},
    )
    self.assertEqual(body["response_format"], schema_format)

  def test_inputs_are_not_mutated(self):
    client_params = {"model": "m"}
    call_options = {"temperature": 0}
    completion.build_request("p", client_params, call_options=call_options)
    self.assertEqual(client_params, {"model": "m"})
    self.assertEqual(call_options, {"temperature": 0})


class ResponseTextTest(parameterized.TestCase):

  @parameterized.named_parameters(
      dict(
          testcase_name="mapping",
          response={"choices": [{"message": {"content": '{"a": 1}'}}]},
          expected='{"a": 1}',
      ),
      dict(
          testcase_name="sdk_object",
          response=_sdk_response('{"a": 1}'),
          expected='{"a": 1}',
      ),
      dict(testcase_name="no_choices", response={"choices": []}, expected=""),
      dict(testcase_name="none", response=None, expected=""),
      dict(
          testcase_name="null_content",
          response={"choices": [{"message": {"content": None}}]},
          expected="",
      ),
      dict(
          testcase_name="no_message",
          response={"choices": [{"finish_reason": "length"}]},
          expected="",
      ),
  )
  def test_response_text(self, response, expected):
    self.assertEqual(completion.response_text(response), expected)

  def test_non_string_content_raises(self):
    with self.assertRaises(exceptions.CompletionError):
      completion.response_text({"choices": [{"message": {"content": [1]}}]})


class AsCompletionCallTest(absltest.TestCase):

  def test_async_openai_style_client(self):
    client = mock.Mock()
    client.chat.completions.create = mock.AsyncMock(
        return_value=_sdk_response("{}")
    )
    call = completion.as_completion_call(client)

    response = asyncio.run(call({"model": "m", "messages": []}))

    self.assertEqual(completion.response_text(response), "{}")
    client.chat.completions.create.assert_awaited_once_with(
        model="m", messages=[]
    )

  def test_sync_openai_style_client(self):
    client = mock.Mock()
    client.chat.completions.create.return_value = _sdk_response("{}")
    call = completion.as_completion_call(client)

    response = asyncio.run(call({"model": "m"}))

    self.assertEqual(completion.response_text(response), "{}")
    client.chat.completions.create.assert_called_once_with(model="m")

  def test_plain_async_callable(self):
    seen = []

    async def send(body):
      seen.append(body)
      return {"choices": [{"message": {"content": "{}"}}]}

    call = completion.as_completion_call(send)
    asyncio.run(call({"model": "m"}))
    self.assertEqual(seen, [{"model": "m"}])

  def test_unusable_client_raises(self):
    with self.assertRaises(exceptions.ConfigError):
      completion.as_completion_call(object())


if __name__ == "__main__":
  absltest.main()
