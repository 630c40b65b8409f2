from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from halltider.errors import ConfigError


ROOT_DIR = Path(__file__).resolve().parents[1]
CONFIG_PATH = ROOT_DIR / "config.yaml"

API_KEY_ENV = "RESROBOTAPIKEY"
SITE_ID = "740049185"
MAX_JOURNEYS = 20
DUMP_PATH = Path("result.json")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001
DEFAULT_STATIC_DIR = "static"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_key: str
    debug: bool = False
    site_id: str = SITE_ID
    max_journeys: int = MAX_JOURNEYS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    static_dir: Path = ROOT_DIR / DEFAULT_STATIC_DIR

    @property
    def dump_path(self) -> Optional[Path]:
        return DUMP_PATH if self.debug else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve or print bus arrival times for Hålltider's stop."
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print the arrival board once with debug logging instead of starting the server.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help="Path to config.yaml (server settings).",
    )
    return parser


def load_config(config_path: Path = CONFIG_PATH) -> Dict[str, Any]:
    if not config_path.exists():
        logger.info("No config file at %s; using defaults.", config_path)
        return {}
    logger.info("Loading config from %s", config_path)
    try:
        with config_path.open() as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping.")
    return data


def _safe_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def load_settings(
    debug: bool,
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    environ = os.environ if environ is None else environ

    api_key = environ.get(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigError(f"no apikey present, use env var {API_KEY_ENV} to set it")

    server = config.get("server", {}) if isinstance(config.get("server"), dict) else {}
    host = environ.get("HOST") or str(server.get("host") or DEFAULT_HOST)
    port = _safe_int(environ.get("PORT") or server.get("port"), DEFAULT_PORT)
    static_dir = Path(str(server.get("static_dir") or DEFAULT_STATIC_DIR))
    if not static_dir.is_absolute():
        static_dir = ROOT_DIR / static_dir

    return Settings(
        api_key=api_key,
        debug=debug,
        host=host,
        port=port,
        static_dir=static_dir,
    )
