"""YAML payload -> typed value.

The target can be anything pydantic's TypeAdapter understands: a BaseModel
subclass, a dataclass, a TypedDict or a plain ``dict[str, Any]``. Every call
builds a fresh value, so keys dropped from the document are gone from the
result too.

Unquoted YAML scalars such as ``port: 8080`` land in ``str`` fields as
``"8080"``. For models, dataclasses and TypedDicts that carry their own
pydantic config this needs ``coerce_numbers_to_str=True`` there; subclassing
``ConfigModel`` sets it.
"""

from __future__ import annotations

import dataclasses
from functools import lru_cache
from typing import Any, TypeVar, get_origin, is_typeddict

import yaml
from pydantic import BaseModel, ConfigDict, PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from s3config.errors import MalformedPayload, UnsupportedTarget

T = TypeVar("T")

SCALAR_CONFIG = ConfigDict(coerce_numbers_to_str=True)


class ConfigModel(BaseModel):
    """Base for config targets: numbers coerce to str, unknown keys are ignored."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore", populate_by_name=True)


def _has_own_config(target: Any) -> bool:
    if get_origin(target) is not None or not isinstance(target, type):
        return False
    return issubclass(target, BaseModel) or dataclasses.is_dataclass(target) or is_typeddict(target)


@lru_cache(maxsize=64)
def target_adapter(target: Any) -> TypeAdapter:
    """TypeAdapter for ``target``; raises UnsupportedTarget if pydantic can't build one."""
    try:
        if _has_own_config(target):
            return TypeAdapter(target)
        return TypeAdapter(target, config=SCALAR_CONFIG)
    except PydanticUserError as exc:
        raise UnsupportedTarget(target, exc) from exc


def load_document(payload: bytes) -> Any:
    try:
        document = yaml.safe_load(payload.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise MalformedPayload(payload, f"not utf-8: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MalformedPayload(payload, str(exc)) from exc
    # an empty file is an empty mapping, not null
    return {} if document is None else document


def decode(payload: bytes, target: type[T]) -> T:
    adapter = target_adapter(target)
    document = load_document(payload)
    try:
        return adapter.validate_python(document)
    except PydanticValidationError as exc:
        raise MalformedPayload(payload, f"{exc.error_count()} field error(s): {exc}") from exc
