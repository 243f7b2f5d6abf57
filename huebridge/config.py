from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


DISCOVERY_HOST = "discovery.meethue.com"
DISCOVERY_PATH = "/"
DESCRIPTION_PATH = "/description.xml"
REQUEST_TIMEOUT = 5  # seconds

TOKEN_ENV_VAR = "HUE_USER_TOKEN"
BRIDGE_ENV_VAR = "HUE_BRIDGE_IP"

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "huebridge" / "config.json"


@dataclass
class Config:
    bridge_ip: str
    username: str = ""


def load_config(path: Path) -> Config:
    data = json.loads(path.read_text())
    return Config(
        bridge_ip=data["bridge_ip"],
        username=data.get("username", ""),
    )


def save_config(path: Path, config: Config) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "bridge_ip": config.bridge_ip,
                "username": config.username,
            },
            indent=2,
        )
    )


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Config:
    env = os.environ if environ is None else environ
    return Config(
        bridge_ip=env.get(BRIDGE_ENV_VAR, ""),
        username=env.get(TOKEN_ENV_VAR, ""),
    )


def resolve_config(path: Path, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Merge the config file with environment overrides.

    Values from the environment win over the file and either source may be
    missing, so ``bridge_ip`` and ``username`` can come back empty.
    """
    cfg = config_from_env(environ)
    if path.exists():
        stored = load_config(path)
        cfg.bridge_ip = cfg.bridge_ip or stored.bridge_ip
        cfg.username = cfg.username or stored.username
    return cfg
