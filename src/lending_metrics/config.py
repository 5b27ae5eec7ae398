import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import BaseModel, PlainSerializer, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lending_metrics.checksum_cache import get_checksum_address
from lending_metrics.constants import DAI_ADDRESS, VAT_ADDRESS

CONFIG_DIR = Path(
    os.environ.get("LENDING_METRICS_CONFIG_DIR", Path.home() / ".config" / "lending_metrics")
)
CONFIG_FILE = CONFIG_DIR / "config.toml"
DB_PATH = CONFIG_DIR / "lending_metrics.db"


class DatabaseSettings(BaseModel):
    # Serialize the path as a string representation of the absolute path
    path: Annotated[
        Path,
        PlainSerializer(lambda path: str(path.absolute()), return_type=str),
    ] = DB_PATH


class ProtocolSettings(BaseModel):
    """
    Identity of the single lending protocol instance tracked by this process.
    """

    id: str = VAT_ADDRESS
    name: str = "Maker Protocol"
    slug: str = "makerdao"
    network: str = "MAINNET"
    debt_token: str = DAI_ADDRESS

    @field_validator("id", "debt_token", mode="after")
    def validate_address(cls, address: str) -> str:  # noqa: N805
        """
        Store contract addresses in checksummed form.
        """

        return get_checksum_address(address)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LENDING_METRICS_",
        env_nested_delimiter="__",
    )

    database: DatabaseSettings = DatabaseSettings()
    protocol: ProtocolSettings = ProtocolSettings()


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        tomlkit.dumps(
            config.model_dump(),
        ),
    )


settings = load_config_from_file(CONFIG_FILE) if CONFIG_FILE.exists() else Settings()
