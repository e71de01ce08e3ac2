"""Parsing for the `custom_payload` input.

The custom payload is data, never code. It is read as strict JSON
first; if that fails it is read as a YAML flow mapping, which accepts
the object-literal style people tend to write in workflow files:

    custom_payload: |
      {
        text: "Deploy finished",
        attachments: [{ color: "good", text: 'all green\\n' }]
      }

The YAML loader is restricted to what an object literal can express:
- No timestamp resolution, so 2024-01-02 stays the string "2024-01-02"
- Single-quoted strings get backslash escapes (\\n, \\t, \\uXXXX ...)
  decoded, as they would be in an object literal

Whatever is parsed must survive a strict JSON encode and satisfy
CustomPayload before anything is sent.
"""

from __future__ import annotations

import json
import re
from typing import Any

import yaml
from pydantic import ValidationError

from workflow_notifier.config import ConfigurationError
from workflow_notifier.schemas import CustomPayload

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def _unescape(value: str) -> str:
    def replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if code.startswith("u") and len(code) == 5:
            return chr(int(code[1:], 16))
        return _ESCAPES.get(code, code)

    return _ESCAPE.sub(replace, value)


class _ObjectLiteralLoader(yaml.SafeLoader):
    """SafeLoader without timestamps, decoding escapes in single quotes."""


_ObjectLiteralLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _construct_str(loader: _ObjectLiteralLoader, node: yaml.ScalarNode) -> str:
    value = loader.construct_scalar(node)
    if node.style == "'":
        return _unescape(value)
    return value


_ObjectLiteralLoader.add_constructor("tag:yaml.org,2002:str", _construct_str)


def _load(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as json_exc:
        try:
            return yaml.load(raw, Loader=_ObjectLiteralLoader)
        except yaml.YAMLError:
            raise ConfigurationError(f"Invalid custom_payload: {json_exc}") from json_exc


def parse_custom_payload(raw: str) -> dict[str, Any]:
    """Parse and validate a custom payload.

    Args:
        raw: The custom_payload input

    Returns:
        The payload exactly as written, as a dict

    Raises:
        ConfigurationError: If the input is empty, unparseable, not an
            object, or fails CustomPayload validation
    """
    if not raw.strip():
        raise ConfigurationError("custom_payload is required when status is custom")

    data = _load(raw)
    if not isinstance(data, dict):
        raise ConfigurationError("custom_payload must be an object")

    try:
        CustomPayload.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid custom_payload: {exc}") from exc

    # NaN, binary and non-string keys have no JSON form
    try:
        json.dumps(data, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"custom_payload is not JSON-serialisable: {exc}") from exc
    return data
