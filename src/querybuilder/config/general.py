from pathlib import Path
from typing import Annotated, ClassVar, override

from pydantic import AfterValidator, BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from querybuilder.types.general import LogLevel
from querybuilder.utils.general import CommentedSettings


class LogSettings(BaseModel):
    """Settings for log handling."""

    to_file: Annotated[
        bool, Field(description="Also write logs to a rotating file.")
    ] = False
    path: Annotated[Path, Field(description="Location of the log file.")] = Path(
        "logs/querybuilder.log"
    )
    rotation: Annotated[
        str, Field(description="When the log file should be rotated.")
    ] = "monthly"
    retention: Annotated[
        int, Field(description="Number of rotated log files to keep.")
    ] = 3


class ScriptSettings(BaseModel):
    """Settings for scripts embedded in queries and aggregations."""

    default_lang: Annotated[
        str, Field(description="Script language used when none is given.")
    ] = "painless"


class SerializationSettings(BaseModel):
    """Settings for rendering request bodies as JSON."""

    indent: Annotated[
        bool, Field(description="Pretty-print JSON output with a 2-space indent.")
    ] = False
    sort_keys: Annotated[
        bool, Field(description="Sort mapping keys in JSON output.")
    ] = False


def uppercase(value: str) -> str:
    """Make a string uppercase."""
    return value.upper()


class GeneralConfig(CommentedSettings):
    """General library config."""

    log_level: Annotated[
        LogLevel,
        AfterValidator(uppercase),
    ] = Field(
        default="INFO",
        description="Level of library logs to print/keep.",
    )

    log: LogSettings = LogSettings()
    script: ScriptSettings = ScriptSettings()
    serialization: SerializationSettings = SerializationSettings()

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(  # pyright:ignore[reportIncompatibleVariableOverride] This is the intended pattern
        case_sensitive=False,
        env_prefix="QUERYBUILDER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file="config/config.yaml",
        yaml_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    @override
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Ensure proper setting priority order."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )


CONFIG = GeneralConfig()
