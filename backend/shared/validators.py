"""Settings helpers for list-valued environment variables (CORS origins)."""

import json
from typing import Any

from pydantic.fields import FieldInfo
from pydantic_settings import EnvSettingsSource

EMPTY_LIST_MESSAGE = "String list value must not be empty"

# Settings fields whose env value is handed to parse_string_list untouched.
STRING_LIST_FIELDS = frozenset({"cors_origins"})


def _from_json(text: str) -> list[str]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON array: {e}") from e
    if not isinstance(parsed, list) or any(not isinstance(item, str) for item in parsed):
        raise ValueError("JSON value must be an array of strings")
    return parsed


def parse_string_list(value: str | list[str], *, allow_empty: bool = False) -> list[str]:
    """Accept a list, a JSON array string or a comma-separated string.

    Blank strings are always rejected; an empty resulting list only when
    ``allow_empty`` is False.
    """
    if isinstance(value, list):
        items = value
    else:
        text = value.strip()
        if not text:
            raise ValueError(EMPTY_LIST_MESSAGE)
        items = _from_json(text) if text.startswith("[") else [p.strip() for p in text.split(",") if p.strip()]

    if not items and not allow_empty:
        raise ValueError(EMPTY_LIST_MESSAGE)
    return items


class StringListEnvSettingsSource(EnvSettingsSource):
    """Pass raw env strings for STRING_LIST_FIELDS through to field validators.

    The default source JSON-decodes list fields itself and would reject the
    comma-separated form.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if field_name in STRING_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
