from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from controller_stub_gen.config import StubConfig, load_config


class TestLoadConfig:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config == StubConfig()
        assert config.output_dir == Path("build/generated-stubs")
        assert config.path_variable_order == "textual"

    def test_reads_yaml_file(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("output_dir: out\nstub_suffix: Mock\npath_variable_order: declaration\n")
        config = load_config(f)
        assert config.output_dir == Path("out")
        assert config.stub_suffix == "Mock"
        assert config.base_suffix == "StubBase"
        assert config.path_variable_order == "declaration"

    def test_picks_up_default_file_in_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "stubgen.yaml").write_text("base_suffix: Base\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().base_suffix == "Base"

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("output_dir: out\n")
        config = load_config(f, output_dir=tmp_path / "cli", path_variable_order=None)
        assert config.output_dir == tmp_path / "cli"
        assert config.path_variable_order == "textual"

    def test_empty_file(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("")
        assert load_config(f) == StubConfig()

    def test_invalid_order(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("path_variable_order: random\n")
        with pytest.raises(ValidationError):
            load_config(f)

    def test_not_a_mapping(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(f)

    def test_broken_yaml(self, tmp_path):
        f = tmp_path / "settings.yaml"
        f.write_text("key: [invalid\n")
        with pytest.raises(yaml.YAMLError):
            load_config(f)
