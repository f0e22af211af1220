"""Tests for configuration loading."""

import stat

import pytest

from pyspaces.config import Config, SpacesCredentials
from pyspaces.exceptions import SpacesConfigError

ENV_NAMES = [
    "SPACES_REGION",
    "SPACES_NAME",
    "SPACES_KEY",
    "SPACES_SECRET",
    "SPACES_ENDPOINT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove Spaces variables from the environment."""
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    """Path to a config file inside a temporary directory."""
    return tmp_path / "pyspaces" / "config"


class TestSpacesCredentials:
    """Tests for SpacesCredentials."""

    def test_endpoint_derived_from_region(self):
        creds = SpacesCredentials(region="nyc3", key="k", secret="s", name="b")
        assert creds.endpoint_url == "https://nyc3.digitaloceanspaces.com"

    def test_explicit_endpoint(self):
        creds = SpacesCredentials(
            region="auto", key="k", secret="s", name="b", endpoint="http://minio:9000"
        )
        assert creds.endpoint_url == "http://minio:9000"

    def test_repr_hides_secret(self):
        creds = SpacesCredentials(region="nyc3", key="k", secret="topsecret", name="b")
        assert "topsecret" not in repr(creds)


class TestConfig:
    """Tests for Config resolution order."""

    def test_credentials_from_environment(self, monkeypatch, config_file):
        monkeypatch.setenv("SPACES_REGION", "ams3")
        monkeypatch.setenv("SPACES_NAME", "site")
        monkeypatch.setenv("SPACES_KEY", "key")
        monkeypatch.setenv("SPACES_SECRET", "secret")

        creds = Config(config_file).credentials()

        assert creds.region == "ams3"
        assert creds.name == "site"
        assert creds.key == "key"
        assert creds.secret == "secret"
        assert creds.endpoint is None

    def test_explicit_arguments_win(self, monkeypatch, config_file):
        monkeypatch.setenv("SPACES_REGION", "ams3")
        monkeypatch.setenv("SPACES_NAME", "site")
        monkeypatch.setenv("SPACES_KEY", "key")
        monkeypatch.setenv("SPACES_SECRET", "secret")

        creds = Config(config_file).credentials(region="sfo3", name="other")

        assert creds.region == "sfo3"
        assert creds.name == "other"

    def test_credentials_from_file(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(
            "# comment\n"
            "SPACES_REGION=fra1\n"
            "SPACES_NAME=bucket\n"
            "SPACES_KEY = key\n"
            "SPACES_SECRET=se=cret\n"
        )

        creds = Config(config_file).credentials()

        assert creds.region == "fra1"
        assert creds.key == "key"
        assert creds.secret == "se=cret"

    def test_environment_overrides_file(self, monkeypatch, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(
            "SPACES_REGION=fra1\nSPACES_NAME=bucket\nSPACES_KEY=k\nSPACES_SECRET=s\n"
        )
        monkeypatch.setenv("SPACES_NAME", "from-env")

        assert Config(config_file).credentials().name == "from-env"

    def test_missing_values_raise(self, monkeypatch, config_file):
        monkeypatch.setenv("SPACES_REGION", "nyc3")

        with pytest.raises(SpacesConfigError, match="SPACES_NAME"):
            Config(config_file).credentials()

    def test_is_configured(self, monkeypatch, config_file):
        cfg = Config(config_file)
        assert not cfg.is_configured()

        for name, value in zip(ENV_NAMES[:4], ["r", "n", "k", "s"]):
            monkeypatch.setenv(name, value)
        assert cfg.is_configured()

    def test_save_credentials_round_trip(self, config_file):
        cfg = Config(config_file)
        cfg.save_credentials(
            SpacesCredentials(
                region="nyc3", key="k", secret="s", name="b", endpoint="http://x"
            )
        )

        loaded = Config(config_file).credentials()
        assert loaded.region == "nyc3"
        assert loaded.endpoint == "http://x"

    def test_saved_file_is_private(self, config_file):
        Config(config_file).save_credentials(
            SpacesCredentials(region="nyc3", key="k", secret="s", name="b")
        )
        mode = stat.S_IMODE(config_file.stat().st_mode)
        assert mode == 0o600

    def test_get_config_path(self, config_file):
        assert Config(config_file).get_config_path() == config_file
