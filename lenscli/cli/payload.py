"""
Payload Resolution.

Builds a typed payload from, in order of precedence:

    1. a positional file argument (YAML or JSON)
    2. an inline flag such as --configs: a file path, else a JSON string
    3. flags bound on the command line

Decoding happens into a plain dict first; flags are then applied
explicitly, filling only the fields still empty, and the result is
validated into the payload model. An explicit name flag that disagrees
with the name inside the file is an error rather than a silent pick.
"""

import json
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lenscli.cli.validation import is_zero
from lenscli.core.exceptions import (
    InvalidInlineConfigError,
    MalformedFileError,
    NameMismatchError,
    ValidationError,
)
from lenscli.core.logging import get_logger

logger = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})
JSON_SUFFIXES = frozenset({".json"})


def _parse_text(text: str, suffix: str) -> Any:
    if suffix in YAML_SUFFIXES:
        return yaml.safe_load(text)
    if suffix in JSON_SUFFIXES:
        return json.loads(text)
    try:
        return json.loads(text)
    except ValueError:
        return yaml.safe_load(text)


def load_file(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML or JSON mapping from disk.

    The format is taken from the extension; other extensions are tried as
    JSON, then YAML.

    Raises:
        MalformedFileError: unreadable file, parse failure, or a document
            that is not a mapping.
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedFileError(str(path), e.strerror or str(e)) from e

    try:
        data = _parse_text(text, file_path.suffix.lower())
    except (ValueError, yaml.YAMLError) as e:
        raise MalformedFileError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise MalformedFileError(str(path), "expected a mapping at the top level")
    return data


def load_inline(raw: str) -> Any:
    """
    Decode an inline flag value: a readable file path first, then JSON.

    Raises:
        InvalidInlineConfigError: neither a loadable file nor valid JSON.
    """
    candidate = Path(raw)
    try:
        is_file = candidate.is_file()
    except OSError:
        is_file = False
    if is_file:
        try:
            return load_file(candidate)
        except MalformedFileError as e:
            logger.debug("Inline value is a file but not loadable, trying JSON", path=raw, error=e.reason)

    try:
        return json.loads(raw)
    except ValueError as e:
        raise InvalidInlineConfigError(raw, str(e)) from e


class PayloadResolver(Generic[PayloadT]):
    """
    Resolve one payload model from file, inline flag and bound flags.

    Args:
        model: Pydantic payload model.
        inline_field: Field that receives the decoded inline flag value.
        name_field: Field holding the resource name, checked against the
            explicit name flag. None disables the check.

    Usage:
        resolver = PayloadResolver(CreateTopicPayload, inline_field="configs", name_field="topic_name")
        payload = resolver.resolve(file=file, inline=configs, flags={"topic_name": name})
    """

    def __init__(
        self,
        model: type[PayloadT],
        inline_field: str | None = None,
        name_field: str | None = "name",
    ) -> None:
        self.model = model
        self.inline_field = inline_field
        self.name_field = name_field

    def _decode(self, file: str | Path | None, inline: str | None) -> dict[str, Any]:
        if file is not None:
            return load_file(file)
        if inline:
            if self.inline_field is None:
                raise ValidationError(f"{self.model.__name__} takes no inline value")
            return {self.inline_field: load_inline(inline)}
        return {}

    def _canonical(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map file keys (camelCase, any case) onto model field names."""
        lookup: dict[str, str] = {}
        for name, field in self.model.model_fields.items():
            lookup[name.lower()] = name
            if field.alias:
                lookup[field.alias.lower()] = name
            choices = getattr(field.validation_alias, "choices", None) or []
            if isinstance(field.validation_alias, str):
                choices = [field.validation_alias]
            for choice in choices:
                if isinstance(choice, str):
                    lookup[choice.lower()] = name
        return {lookup.get(str(key).lower(), key): value for key, value in data.items()}

    def resolve(
        self,
        file: str | Path | None = None,
        inline: str | None = None,
        flags: dict[str, Any] | None = None,
    ) -> PayloadT:
        """
        Build the payload.

        Args:
            file: Positional file argument, if any.
            inline: Raw inline flag value (--config/--configs), if any.
            flags: Field name -> flag value; None means "not given".

        Raises:
            MalformedFileError: the file cannot be parsed into the payload shape.
            InvalidInlineConfigError: the inline value is neither file nor JSON.
            NameMismatchError: explicit name flag differs from the file's name.
            ValidationError: flags alone do not form a valid payload.
        """
        data = self._canonical(self._decode(file, inline))

        for key, value in (flags or {}).items():
            if value is None:
                continue
            current = data.get(key)
            if key == self.name_field and not is_zero(current) and not is_zero(value) and current != value:
                raise NameMismatchError(str(value), str(current))
            if is_zero(current):
                data[key] = value

        try:
            payload = self.model.model_validate(data)
        except PydanticValidationError as e:
            if file is not None:
                raise MalformedFileError(str(file), str(e)) from e
            if inline:
                raise InvalidInlineConfigError(inline, str(e)) from e
            raise ValidationError(str(e)) from e

        normalize = getattr(payload, "normalize", None)
        if callable(normalize):
            normalize()
        return payload
