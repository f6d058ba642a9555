"""
Configuration handling for putioarr.

The configuration lives in a TOML file. Defaults are merged with the file
contents and the result is validated into a Config object.
"""
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from putioarr.errors import ConfigError
from putioarr.utils.logger import get_logger

logger = get_logger("config")

ARR_APP_TYPES = ["sonarr", "radarr", "whisparr"]

DEFAULTS: Dict[str, Any] = {
    "bind_address": "0.0.0.0",
    "download_workers": 4,
    "orchestration_workers": 10,
    "loglevel": "info",
    "polling_interval": 10,
    "port": 9091,
    "uid": 1000,
    "skip_directories": ["sample", "extras"],
}

REQUIRED_KEYS = ["username", "password", "download_directory"]

CONFIG_TEMPLATE = """# Required. Username and password that sonarr/radarr use to connect to the proxy
username = "myusername"
password = "mypassword"

# Required. Directory where the proxy will download files to. This directory has to be readable by
# sonarr/radarr in order to import downloads
download_directory = "/path/to/downloads"

# Optional bind address, default "0.0.0.0"
bind_address = "0.0.0.0"

# Optional TCP port, default 9091
port = 9091

# Optional log level, default "info"
loglevel = "info"

# Optional UID, default 1000. Change the owner of the downloaded files to this UID. Requires root.
uid = 1000

# Optional polling interval in secs, default 10.
polling_interval = 10

# Optional skip directories when downloading, default ["sample", "extras"]
skip_directories = ["sample", "extras"]

# Optional number of orchestration workers, default 10. Unless there are many changes coming from
# put.io, you shouldn't have to touch this number. 10 is already overkill.
orchestration_workers = 10

# Optional number of download workers, default 4. This controls how many downloads we run in parallel.
download_workers = 4

[putio]
# Required. Putio API key. You can generate one using `putioarr get-token`
api_key = "{putio_api_key}"

# At least one of sonarr, radarr or whisparr is required. putioarr asks them whether a
# download has been imported before removing it.
[sonarr]
url = "http://mysonarrhost:8989/sonarr"
# Can be found in Settings -> General
api_key = "MYSONARRAPIKEY"

# [radarr]
# url = "http://myradarrhost:7878/radarr"
# api_key = "MYRADARRAPIKEY"

# [whisparr]
# url = "http://mywhisparrhost:6969/whisparr"
# api_key = "MYWHISPARRAPIKEY"
"""


@dataclass
class ArrConfig:
    """Connection details for a single arr application"""
    url: str
    api_key: str


@dataclass
class PutioConfig:
    api_key: str


@dataclass
class Config:
    """Validated putioarr configuration"""
    username: str
    password: str
    download_directory: str
    putio: PutioConfig
    bind_address: str = "0.0.0.0"
    port: int = 9091
    loglevel: str = "info"
    uid: int = 1000
    polling_interval: int = 10
    skip_directories: List[str] = field(default_factory=lambda: ["sample", "extras"])
    orchestration_workers: int = 10
    download_workers: int = 4
    sonarr: Optional[ArrConfig] = None
    radarr: Optional[ArrConfig] = None
    whisparr: Optional[ArrConfig] = None

    def configured_arrs(self) -> List[Tuple[str, ArrConfig]]:
        """
        Get the arr applications that have been configured.

        Returns:
            List of (app_type, ArrConfig) tuples in sonarr, radarr, whisparr order
        """
        return [
            (app_type, getattr(self, app_type))
            for app_type in ARR_APP_TYPES
            if getattr(self, app_type) is not None
        ]


def default_config_path() -> str:
    """Get the config path, honouring APP_CONFIG_PATH."""
    env_path = os.environ.get("APP_CONFIG_PATH")
    if env_path:
        return env_path
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return os.path.join(config_home, "putioarr", "config.toml")


def _parse_arr(app_type: str, section: Any) -> Optional[ArrConfig]:
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ConfigError(f"[{app_type}] must be a table")
    url = section.get("url")
    api_key = section.get("api_key")
    if not url or not api_key:
        raise ConfigError(f"[{app_type}] requires both url and api_key")
    return ArrConfig(url=str(url).rstrip("/"), api_key=str(api_key))


def parse_config(data: Dict[str, Any]) -> Config:
    """
    Merge raw config data with defaults and validate it.

    Args:
        data: Parsed TOML document

    Returns:
        Config object

    Raises:
        ConfigError: When required settings are missing or invalid
    """
    merged = dict(DEFAULTS)
    merged.update(data)

    missing = [key for key in REQUIRED_KEYS if not merged.get(key)]
    if missing:
        raise ConfigError(f"Missing required config setting(s): {', '.join(missing)}")

    putio_section = merged.get("putio")
    if not isinstance(putio_section, dict) or not putio_section.get("api_key"):
        raise ConfigError("Missing required config setting: putio.api_key")

    arrs = {app_type: _parse_arr(app_type, merged.get(app_type)) for app_type in ARR_APP_TYPES}
    if not any(arrs.values()):
        raise ConfigError("At least one of sonarr, radarr or whisparr must be configured")

    try:
        config = Config(
            username=str(merged["username"]),
            password=str(merged["password"]),
            download_directory=str(merged["download_directory"]),
            putio=PutioConfig(api_key=str(putio_section["api_key"])),
            bind_address=str(merged["bind_address"]),
            port=int(merged["port"]),
            loglevel=str(merged["loglevel"]),
            uid=int(merged["uid"]),
            polling_interval=int(merged["polling_interval"]),
            skip_directories=[str(name).lower() for name in merged["skip_directories"]],
            orchestration_workers=int(merged["orchestration_workers"]),
            download_workers=int(merged["download_workers"]),
            **arrs,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e

    if config.orchestration_workers < 1 or config.download_workers < 1:
        raise ConfigError("orchestration_workers and download_workers must be at least 1")
    if config.polling_interval < 1:
        raise ConfigError("polling_interval must be at least 1 second")

    return config


def load_config(config_path: str) -> Config:
    """
    Load and validate the config file.

    Args:
        config_path: Path to the TOML config file

    Returns:
        Config object

    Raises:
        ConfigError: When the file can't be read or is invalid
    """
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file {config_path} not found. Create one with `putioarr generate-config`"
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Unable to parse {config_path}: {e}") from e

    return parse_config(data)


def render_config(putio_api_key: str) -> str:
    """Render the commented config template with the given API key."""
    return CONFIG_TEMPLATE.replace("{putio_api_key}", putio_api_key)


def generate_config(config_path: str, putio_api_key: str) -> None:
    """
    Write a fresh config file, backing up any existing one to <path>.bak.

    Args:
        config_path: Where to write the config
        putio_api_key: put.io API token to put in the config
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    print(f"Generating config {config_path}")
    rendered = render_config(putio_api_key)

    if path.exists():
        print(f"Backing up config {config_path}")
        os.replace(path, f"{config_path}.bak")

    print(f"Writing {config_path}")
    with open(path, "w") as f:
        f.write(rendered)
