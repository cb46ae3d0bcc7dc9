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

"""Public exceptions API for intext.

Only configuration problems escape `Intext.extract`. Service failures and
unparsable responses are recovered inside the pipeline and surface as null
fields or an empty final object.
"""

from __future__ import annotations

__all__ = [
    "IntextError",
    "ConfigError",
    "SchemaError",
    "CompletionError",
    "ResolverParsingError",
]


class IntextError(Exception):
  """Base class for all intext errors."""


class ConfigError(IntextError):
  """Invalid call configuration, raised before any completion call is made."""


class SchemaError(ConfigError):
  """The extraction schema is missing or malformed."""


class CompletionError(IntextError):
  """The completion service returned something without a usable shape."""


class ResolverParsingError(IntextError):
  """Completion text could not be parsed into structured data."""
