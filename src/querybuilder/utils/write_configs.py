from pathlib import Path

from querybuilder.config.general import GeneralConfig


def write_default_configs(directory: Path = Path("config")) -> Path:
    """Write out config defaults."""
    path = (directory / "config.default.yaml").resolve()
    GeneralConfig.write_default(path)
    return path


if __name__ == "__main__":
    write_default_configs()
