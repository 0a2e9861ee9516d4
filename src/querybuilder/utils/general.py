from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticUndefined
from pydantic_settings import BaseSettings
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from querybuilder.types.general import JsonSerializable

yaml = YAML()


class CommentedSettings(BaseSettings):
    """Pydantic BaseSettings which can dump its defaults as commented yaml.

    Field descriptions become end-of-line comments, nested models become
    nested mappings.
    """

    @staticmethod
    def to_yaml_value(value: Any) -> JsonSerializable | CommentedMap:
        """Convert a settings value into something ruamel can represent."""
        if isinstance(value, BaseModel):
            return CommentedSettings.to_commented(value)
        if value is None or isinstance(value, str | int | float | bool):
            return value
        return str(value)

    @staticmethod
    def to_commented(model: BaseModel | type[BaseModel]) -> CommentedMap:
        """Map a model's values, or a model class's defaults, with comments."""
        model_fields = (
            model.model_fields if isinstance(model, type) else type(model).model_fields
        )
        commented = CommentedMap()
        for name, field_info in model_fields.items():
            if isinstance(model, type):
                value = field_info.get_default(call_default_factory=True)
                if value is PydanticUndefined:
                    continue
            else:
                value = getattr(model, name)

            commented[name] = CommentedSettings.to_yaml_value(value)
            if field_info.description:
                commented.yaml_add_eol_comment(comment=field_info.description, key=name)  # pyright:ignore[reportUnknownMemberType]

        return commented

    @classmethod
    def write_default(cls, path: Path) -> None:
        """Write the settings defaults to a given path."""
        start_comment = "\n".join(
            [
                "Default configuration values for querybuilder.",
                "Generated from the settings models, regenerate instead of editing.",
                "Override values in config/config.yaml or through the environment.",
            ]
        )
        commented = CommentedSettings.to_commented(cls)

        commented.yaml_set_start_comment(start_comment)  # pyright:ignore[reportUnknownMemberType] ruamel uses unknowns
        path.parent.mkdir(parents=True, exist_ok=True)
        yaml.dump(commented, path)  # pyright:ignore[reportUnknownMemberType] ruamel uses unknowns


def check_argument(value: Any, argument_name: str, *allowed_types: type) -> None:
    """Raise a TypeError unless the value is an instance of one of the allowed types."""
    if any(isinstance(value, allowed_type) for allowed_type in allowed_types):
        return

    allowed = ", ".join(allowed_type.__name__ for allowed_type in allowed_types)
    raise TypeError(
        f"Expected `{argument_name}` to be one of: {allowed} but {type(value).__name__} was given"
    )


def check_non_negative_integer(value: Any, argument_name: str) -> int:
    """Validate that a value is a non-negative int (bools excluded) and return it."""
    if isinstance(value, bool):
        raise TypeError(f"Expected `{argument_name}` to be one of: int but bool was given")
    check_argument(value, argument_name, int)
    if value < 0:
        raise ValueError(f"`{argument_name}` should be a positive integer")
    return value
