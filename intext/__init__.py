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

"""intext: schema-driven extraction from documents longer than a context window."""

from __future__ import annotations

from intext.chunking import Window
from intext.chunking import build_windows
from intext.data import ExtractMetadata
from intext.data import ExtractResult
from intext.data import ProvenanceEntry
from intext.data import WindowResult
from intext.exceptions import ConfigError
from intext.exceptions import IntextError
from intext.exceptions import SchemaError
from intext.extraction import Intext
from intext.extraction import create_intext
from intext.schema import ArrayNode
from intext.schema import BooleanNode
from intext.schema import NumberNode
from intext.schema import ObjectNode
from intext.schema import SchemaNode
from intext.schema import StringNode
from intext.tokenizer import default_tokenizer

__version__ = "0.1.0"

__all__ = [
    "ArrayNode",
    "BooleanNode",
    "ConfigError",
    "ExtractMetadata",
    "ExtractResult",
    "Intext",
    "IntextError",
    "NumberNode",
    "ObjectNode",
    "ProvenanceEntry",
    "SchemaError",
    "SchemaNode",
    "StringNode",
    "Window",
    "WindowResult",
    "build_windows",
    "create_intext",
    "default_tokenizer",
]
