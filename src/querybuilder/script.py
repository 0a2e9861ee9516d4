from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from querybuilder.config.general import CONFIG
from querybuilder.types.dsl import ESScript


def _default_lang() -> str:
    return CONFIG.script.default_lang


@dataclass(frozen=True, kw_only=True, slots=True)
class Script:
    """A named computation (source, language and parameters) run by the engine.

    Scripts are immutable: `params` is copied into a read-only mapping on
    construction, so callers can keep mutating the dict they passed in.
    Being immutable, a Script is shared rather than copied when the
    aggregation or clause holding it is cloned.
    """

    source: str
    lang: str = field(default_factory=_default_lang)
    params: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        """Freeze a private copy of the parameters."""
        if self.params is not None:
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def clone(self) -> "Script":
        """Return this script, scripts cannot be modified in place."""
        return self

    def to_dict(self) -> ESScript:
        """Serialize the script, omitting absent parameters."""
        script = ESScript(source=self.source, lang=self.lang)
        if self.params is not None:
            script["params"] = dict(self.params)
        return script
