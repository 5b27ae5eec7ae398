from pathlib import Path

import pytest

from lending_metrics.config import (
    DatabaseSettings,
    ProtocolSettings,
    Settings,
    load_config_from_file,
    save_config_to_file,
)
from lending_metrics.constants import DAI_ADDRESS, VAT_ADDRESS


def test_default_protocol_settings():
    protocol = ProtocolSettings()
    assert protocol.id == VAT_ADDRESS
    assert protocol.debt_token == DAI_ADDRESS
    assert protocol.slug == "makerdao"


def test_protocol_addresses_are_checksummed():
    protocol = ProtocolSettings(id=VAT_ADDRESS.lower(), debt_token=DAI_ADDRESS.lower())
    assert protocol.id == VAT_ADDRESS
    assert protocol.debt_token == DAI_ADDRESS


def test_save_and_load_config(tmp_path: Path):
    config_path = tmp_path / "config.toml"
    config = Settings(
        database=DatabaseSettings(path=tmp_path / "metrics.db"),
        protocol=ProtocolSettings(name="Test Protocol", slug="test"),
    )

    save_config_to_file(config, config_path)
    loaded = load_config_from_file(config_path)

    assert loaded.database.path == (tmp_path / "metrics.db").absolute()
    assert loaded.protocol.name == "Test Protocol"
    assert loaded.protocol.slug == "test"
    assert loaded.protocol.id == VAT_ADDRESS


def test_environment_override(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LENDING_METRICS_PROTOCOL__NETWORK", "GOERLI")
    assert Settings().protocol.network == "GOERLI"
