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

"""Client setup shared by the example scripts.

Reads OPENAI_API_KEY, OPENAI_BASE_URL (optional, e.g. an OpenRouter endpoint)
and INTEXT_MODEL from the environment or a local .env file.
"""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv
import openai

import intext

load_dotenv()

DEFAULT_MODEL = "gpt-4o-mini"


def create_intext_instance(
    api_key: str | None = None, base_url: str | None = None
) -> intext.Intext:
  api_key = api_key or os.environ.get("OPENAI_API_KEY")
  base_url = base_url or os.getenv("OPENAI_BASE_URL") or None
  if not api_key:
    print(
        "WARNING: OPENAI_API_KEY not set - completion calls will fail.",
        file=sys.stderr,
    )
  client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url)
  return intext.create_intext(
      client,
      client_params={
          "model": os.getenv("INTEXT_MODEL", DEFAULT_MODEL),
          "temperature": 0,
      },
      default_request_params={"stream": False},
  )
