from pathlib import Path

import pytest
from pydantic import ValidationError

from hlsfetch.exceptions import ConfigurationError
from hlsfetch.models.config import DEFAULT_USER_AGENT, DownloadConfig, TransportConfig
from hlsfetch.storage.config_manager import ConfigManager


def test_defaults():
    config = DownloadConfig()

    assert config.max_workers == 8
    assert config.max_attempts == 5
    assert config.max_loss_ratio == 0.05
    assert config.user_agent == DEFAULT_USER_AGENT
    assert config.transport.http_version == "1.1"
    assert config.connection_limit == 16


def test_explicit_connection_limit():
    config = DownloadConfig(transport=TransportConfig(connection_limit=3))
    assert config.connection_limit == 3


@pytest.mark.parametrize(
    "field, value",
    [
        ("max_workers", 0),
        ("max_workers", 33),
        ("max_attempts", 0),
        ("retry_delay", -1),
        ("backoff", "random"),
        ("max_loss_ratio", 1.0),
        ("max_loss_ratio", -0.1),
        ("user_agent", "   "),
        ("max_playlist_depth", 0),
    ],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        DownloadConfig(**{field: value})


@pytest.mark.parametrize(
    "field, value",
    [("http_version", "2"), ("connection_limit", 0), ("request_timeout", 0)],
)
def test_invalid_transport_rejected(field, value):
    with pytest.raises(ValidationError):
        TransportConfig(**{field: value})


def test_backoff_name_is_normalised():
    assert DownloadConfig(backoff="Exponential").backoff == "exponential"


def test_ini_keys_flatten_transport():
    keys = DownloadConfig.get_ini_keys()

    assert "max_workers" in keys
    assert "transport_http_version" in keys
    assert "transport" not in keys


def test_load_without_file_uses_defaults(tmp_path):
    config = ConfigManager(tmp_path / "missing.ini").load_config({"max_workers": 3})

    assert config.max_workers == 3
    assert config.max_attempts == 5


def test_save_then_load_round_trip(tmp_path):
    path = tmp_path / "conf" / "config.ini"
    manager = ConfigManager(path)

    manager.save_new_config({"max_workers": 12, "transport_http_version": "1.0"})

    assert path.is_file()
    config = ConfigManager(path).load_config()
    assert config.max_workers == 12
    assert config.transport.http_version == "1.0"
    assert config.output_dir is None


def test_cli_options_override_file(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[DEFAULT]\nmax_workers = 4\nmax_loss_ratio = 0.2\ntransport_connect_timeout = 5\n"
    )

    config = ConfigManager(path).load_config(
        {"max_workers": 6, "output_dir": tmp_path}
    )

    assert config.max_workers == 6
    assert config.max_loss_ratio == 0.2
    assert config.transport.connect_timeout == 5.0
    assert config.output_dir == Path(tmp_path)


def test_unknown_keys_are_ignored(tmp_path, caplog):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = 2\nquality = 27\ntransport_bogus = 1\n")

    with caplog.at_level("WARNING"):
        config = ConfigManager(path).load_config()

    assert config.max_workers == 2
    assert "quality" in caplog.text
    assert "transport_bogus" in caplog.text


def test_invalid_file_value_raises_configuration_error(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = lots\n")

    with pytest.raises(ConfigurationError, match="validation failed"):
        ConfigManager(path).load_config()


def test_malformed_file_raises_configuration_error(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("max_workers = 2\n")

    with pytest.raises(ConfigurationError, match="parsing"):
        ConfigManager(path).load_config()
