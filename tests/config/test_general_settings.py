import logging
from pathlib import Path

import pytest
from loguru import logger
from ruamel.yaml import YAML

from querybuilder.config.general import CONFIG, GeneralConfig, LogSettings
from querybuilder.config.logger import configure_logging, format_stdout
from querybuilder.query_builder import QueryBuilder
from querybuilder.query_clauses.query_clauses import QueryClauses
from querybuilder.script import Script
from querybuilder.utils.write_configs import write_default_configs


@pytest.fixture
def reset_logging():
    yield
    logger.remove()
    logger.disable("querybuilder")


def test_general_config_defaults():
    config = GeneralConfig()
    assert config.log_level == "INFO"
    assert config.log.to_file is False
    assert config.log.path == Path("logs/querybuilder.log")
    assert config.script.default_lang == "painless"
    assert config.serialization.indent is False
    assert config.serialization.sort_keys is False


def test_log_level_is_uppercased():
    assert GeneralConfig(log_level="debug").log_level == "DEBUG"  # pyright:ignore[reportArgumentType]


def test_log_level_rejects_unknown_levels():
    with pytest.raises(ValueError):
        GeneralConfig(log_level="verbose")  # pyright:ignore[reportArgumentType]


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("QUERYBUILDER_SCRIPT__DEFAULT_LANG", "expression")
    monkeypatch.setenv("QUERYBUILDER_SERIALIZATION__INDENT", "true")
    monkeypatch.setenv("QUERYBUILDER_LOG_LEVEL", "warning")

    config = GeneralConfig()
    assert config.script.default_lang == "expression"
    assert config.serialization.indent is True
    assert config.log_level == "WARNING"


def test_init_values_take_priority(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("QUERYBUILDER_LOG_LEVEL", "warning")

    assert GeneralConfig(log_level="ERROR").log_level == "ERROR"


def test_script_language_follows_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(CONFIG.script, "default_lang", "expression")

    assert Script(source="doc['runtime'].value").lang == "expression"


def test_write_default_configs(tmp_path: Path):
    path = write_default_configs(tmp_path / "config")

    assert path == (tmp_path / "config" / "config.default.yaml").resolve()
    text = path.read_text()
    assert text.startswith("# Default configuration values for querybuilder.")
    assert "Script language used when none is given." in text
    assert "Location of the log file." in text

    written = YAML(typ="safe").load(path)
    assert written["log_level"] == "INFO"
    assert written["log"]["path"] == "logs/querybuilder.log"
    assert written["script"] == {"default_lang": "painless"}
    assert written["serialization"] == {"indent": False, "sort_keys": False}


@pytest.mark.usefixtures("reset_logging")
def test_configure_logging_enables_library_logs():
    messages: list[str] = []
    std_log_config = configure_logging(GeneralConfig(log_level="DEBUG"))
    logger.add(messages.append, level="DEBUG", format="{message}")

    QueryBuilder().merge(QueryBuilder())

    assert "querybuilder" in std_log_config["loggers"]
    assert any("Merged query builders" in message for message in messages)


@pytest.mark.usefixtures("reset_logging")
def test_library_is_silent_until_configured():
    messages: list[str] = []
    logger.disable("querybuilder")
    logger.add(messages.append, level="TRACE", format="{message}")

    QueryBuilder().merge(QueryBuilder())

    assert messages == []


@pytest.mark.usefixtures("reset_logging")
def test_standard_logging_is_intercepted():
    messages: list[str] = []
    configure_logging(GeneralConfig(log_level="DEBUG"))
    logger.add(messages.append, level="DEBUG", format="{message}")

    logging.getLogger("querybuilder.embedding").info("forwarded through loguru")

    assert any("forwarded through loguru" in message for message in messages)


@pytest.mark.usefixtures("reset_logging")
def test_configure_logging_to_file(tmp_path: Path):
    log_path = tmp_path / "querybuilder.log"
    config = GeneralConfig(
        log_level="DEBUG",
        log=LogSettings(to_file=True, path=log_path),
    )

    configure_logging(config)
    QueryBuilder().merge(QueryBuilder())
    logger.remove()

    assert "Merged query builders" in log_path.read_text()


@pytest.mark.usefixtures("reset_logging")
def test_library_logs_are_tagged_with_builder():
    builders: list[str] = []
    configure_logging(GeneralConfig(log_level="DEBUG"))
    logger.add(
        lambda message: builders.append(message.record["extra"].get("builder", "")),
        level="TRACE",
    )

    QueryClauses().term(field="user", value="kimchy").merge(
        QueryClauses().exists(field="deleted_at")
    ).negate()

    assert "Bool" in builders
    assert "QueryClauses" in builders
    assert "negate" in builders


def test_stdout_format_shows_builder_tag():
    tagged = format_stdout({"extra": {"builder": "QueryClauses"}})  # pyright:ignore[reportArgumentType]
    untagged = format_stdout({"extra": {}})  # pyright:ignore[reportArgumentType]

    assert "<green>QueryClauses</green>" in tagged
    assert "<green>" not in untagged
