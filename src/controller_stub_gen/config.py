"""Generator settings, optionally loaded from a YAML file."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel

DEFAULT_CONFIG_NAME = "stubgen.yaml"


class StubConfig(BaseModel):
    """Settings shared by the scanner, processor and stub writer."""

    output_dir: Path = Path("build/generated-stubs")
    stub_suffix: str = "Stub"
    base_suffix: str = "StubBase"
    source_pattern: str = "**/*.java"
    encoding: str = "utf-8"
    path_variable_order: Literal["textual", "declaration"] = "textual"


def load_config(file_path: Path | None = None, **overrides) -> StubConfig:
    """Load settings from ``file_path`` (if given) and apply non-None overrides.

    Without an explicit path, ``stubgen.yaml`` in the working directory is
    used when present.
    """
    data: dict = {}
    if file_path is None and Path(DEFAULT_CONFIG_NAME).is_file():
        file_path = Path(DEFAULT_CONFIG_NAME)
    if file_path is not None:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{file_path}: expected a mapping, got {type(data).__name__}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return StubConfig(**data)
