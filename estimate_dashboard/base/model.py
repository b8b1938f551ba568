import logging
import re
from abc import ABC
from dataclasses import dataclass, fields
from enum import Enum
from types import UnionType
from typing import Any, TypeVar, Union, get_args, get_origin

from estimate_dashboard.converters import camel_case, snake_case
from estimate_dashboard.type_defs import JsonObject

ModelType = TypeVar("ModelType", bound="BaseModel")
logger = logging.getLogger(__name__)


@dataclass
class BaseModel(ABC):
    id: int | None

    @classmethod
    def from_dict(cls: type[ModelType], data: dict[str, Any]) -> ModelType:
        instance = cls(id=data.get("id"))
        cleaned_data = {cls.clean_key(key): value for key, value in data.items()}

        for current_field in fields(cls):
            if not current_field.init or current_field.name == "id":
                continue

            if current_field.name in cleaned_data:
                value = cleaned_data[current_field.name]

                enum_type = cls._resolve_enum_type(current_field.type)
                if isinstance(value, str) and enum_type is not None:
                    try:
                        value = enum_type(value)
                    except ValueError:
                        logger.warning(
                            "Unknown %s value for %s: %s", enum_type.__name__, current_field.name, value
                        )

                setattr(instance, current_field.name, value)

        return instance

    @classmethod
    def from_list(cls: type[ModelType], data: list[dict[str, Any]]) -> list[ModelType]:
        return [cls.from_dict(item) for item in data if isinstance(item, dict)]

    def to_dict(self) -> JsonObject:
        result: JsonObject = {}
        for current_field in fields(self):
            value = getattr(self, current_field.name)
            if isinstance(value, Enum):
                value = value.value
            result[camel_case(current_field.name)] = value
        return result

    @staticmethod
    def clean_key(key: str) -> str:
        cleaned_key = re.sub(r"[ /-]", "_", key.strip())
        return snake_case(cleaned_key)

    @staticmethod
    def _resolve_enum_type(field_type: object) -> type[Enum] | None:
        origin = get_origin(field_type)
        if origin in {Union, UnionType}:
            for arg in get_args(field_type):
                if isinstance(arg, type) and issubclass(arg, Enum):
                    return arg
            return None

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            return field_type

        return None
