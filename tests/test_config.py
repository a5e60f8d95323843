from pathlib import Path

import pytest

from tgkit import config as config_module
from tgkit.config import (
    ENV_IMMEDIATE,
    ENV_STRICT,
    ENV_USERNAME,
    BotOptions,
    ConfigError,
    apply_env_overrides,
    load_options,
    options_from_config,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_STRICT, ENV_IMMEDIATE, ENV_USERNAME):
        monkeypatch.delenv(name, raising=False)


class TestLoadOptions:
    def test_load_from_explicit_path(self, tmp_path: Path) -> None:
        config_file = tmp_path / "tgkit.toml"
        config_file.write_text('[bot]\nstrict = true\nusername = "@my_bot"\n')

        options = load_options(config_file)

        assert options == BotOptions(strict=True, immediate=False, username="my_bot")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Missing config file"):
            load_options(tmp_path / "nonexistent.toml")

    def test_malformed_toml_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "bad.toml"
        bad_file.write_text("invalid = [unclosed")

        with pytest.raises(ConfigError, match="Malformed TOML"):
            load_options(bad_file)

    def test_defaults_without_any_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module, "HOME_CONFIG_PATH", tmp_path / "home.toml")

        assert load_options() == BotOptions()

    def test_local_file_is_discovered(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        local = tmp_path / ".tgkit" / "tgkit.toml"
        local.parent.mkdir()
        local.write_text("[bot]\nimmediate = true\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module, "HOME_CONFIG_PATH", tmp_path / "home.toml")

        assert load_options().immediate is True


class TestOptionsFromConfig:
    def test_missing_table_gives_defaults(self) -> None:
        assert options_from_config({}, Path("x.toml")) == BotOptions()

    def test_non_bool_strict(self) -> None:
        with pytest.raises(ConfigError, match="bot.strict"):
            options_from_config({"bot": {"strict": "yes"}}, Path("x.toml"))

    def test_bot_must_be_table(self) -> None:
        with pytest.raises(ConfigError, match="expected a table"):
            options_from_config({"bot": 1}, Path("x.toml"))

    def test_blank_username(self) -> None:
        with pytest.raises(ConfigError, match="bot.username"):
            options_from_config({"bot": {"username": "  "}}, Path("x.toml"))


class TestEnvOverrides:
    def test_env_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_STRICT, "yes")
        monkeypatch.setenv(ENV_IMMEDIATE, "0")
        monkeypatch.setenv(ENV_USERNAME, "@env_bot")

        options = apply_env_overrides(BotOptions(immediate=True, username="file_bot"))

        assert options == BotOptions(strict=True, immediate=False, username="env_bot")

    def test_invalid_boolean(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_STRICT, "maybe")

        with pytest.raises(ConfigError, match=ENV_STRICT):
            apply_env_overrides(BotOptions())

    def test_blank_values_are_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_USERNAME, "   ")
        options = BotOptions(username="kept")

        assert apply_env_overrides(options) is options
