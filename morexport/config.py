"""
morexport/config.py
Run configuration. Read once at startup from a dotenv file overlaid by the
process environment, then passed explicitly to the executor and reports.

KEYS (historical .env names):
  DB_IP_MOR, DB_PORT_MOR, DB_NAME_MOR, DB_USER_MOR, DB_PASS_MOR
  DB_SSH_IP_MOR, DB_SSH_PORT_MOR, DB_SSH_USER_MOR, DB_SSH_KEY_MOR
  DB_SSH_KEY_PASS_MOR            optional
  DB_SSH_HOST_KEY_POLICY_MOR     ignore | warn | strict   (default: ignore)
  DB_SSH_KNOWN_HOSTS_MOR         optional known_hosts path
  DB_CONNECT_TIMEOUT_MOR         optional, seconds
  MOR_DEVICE_GROUPS              e.g. "EN:181,1081;FR:671,1072"
  MOR_PROVIDER_IDS               e.g. "561,721,21"
  MOR_AVERAGE_DECIMALS           unset = legacy 4-character truncation
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

from morexport.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = '.env'

HOST_KEY_POLICIES = ('ignore', 'warn', 'strict')

DEFAULT_DEVICE_GROUPS = 'EN:181,1081;FR:671,1072'
DEFAULT_PROVIDER_IDS  = '561,721,21,31,101,111,441,711,781,801'

REQUIRED_KEYS = (
    'DB_IP_MOR',
    'DB_NAME_MOR',
    'DB_USER_MOR',
    'DB_PASS_MOR',
    'DB_SSH_IP_MOR',
    'DB_SSH_USER_MOR',
    'DB_SSH_KEY_MOR',
)


@dataclass(frozen=True)
class ConnectionProfile:
    """SSH hop and database credentials for the one MOR database of a run."""
    ssh_host:           str
    ssh_port:           int
    ssh_user:           str
    ssh_key_path:       Path
    ssh_key_passphrase: Optional[str]
    db_host:            str
    db_port:            int
    db_name:            str
    db_user:            str
    db_password:        str
    host_key_policy:    str             = 'ignore'
    known_hosts_path:   Optional[Path]  = None
    connect_timeout:    Optional[float] = None

    @property
    def db_address(self) -> Tuple[str, int]:
        return (self.db_host, self.db_port)

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks.
        return (
            f"ConnectionProfile(ssh={self.ssh_user}@{self.ssh_host}:{self.ssh_port}, "
            f"db={self.db_user}@{self.db_host}:{self.db_port}/{self.db_name})"
        )


@dataclass(frozen=True)
class Settings:
    profile:          ConnectionProfile
    device_groups:    Tuple[Tuple[str, Tuple[int, ...]], ...]
    provider_ids:     Tuple[int, ...]
    average_decimals: Optional[int] = None


# ── LOADING ──────────────────────────────────────────────────

def load_settings(env_file: Optional[Path] = None,
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from a dotenv file overlaid by environment variables.

    An explicit env_file must exist. The default .env is optional as long as
    the environment supplies the required keys.
    """
    values: Dict[str, Optional[str]] = {}

    if env_file is not None:
        path = Path(env_file)
        if not path.is_file():
            raise ConfigError(f"config file {path} not found")
        values.update(dotenv_values(path))
        logger.info(f"Using config file: {path}")
    else:
        path = Path.cwd() / DEFAULT_ENV_FILE
        if path.is_file():
            values.update(dotenv_values(path))
            logger.info(f"Using config file: {path}")
        else:
            logger.debug(f"No {DEFAULT_ENV_FILE} in {Path.cwd()}, using environment only")

    environ = os.environ if environ is None else environ
    for key, value in environ.items():
        if key.endswith('_MOR') or key.startswith('MOR_'):
            values[key] = value

    return settings_from_mapping(values)


def settings_from_mapping(values: Mapping[str, Optional[str]]) -> Settings:
    missing = [k for k in REQUIRED_KEYS if not (values.get(k) or '').strip()]
    if missing:
        raise ConfigError(f"Missing required settings: {', '.join(missing)}")

    policy = (values.get('DB_SSH_HOST_KEY_POLICY_MOR') or 'ignore').strip().lower()
    if policy not in HOST_KEY_POLICIES:
        raise ConfigError(
            f"DB_SSH_HOST_KEY_POLICY_MOR must be one of {', '.join(HOST_KEY_POLICIES)}, got {policy!r}"
        )

    known_hosts = (values.get('DB_SSH_KNOWN_HOSTS_MOR') or '').strip()
    timeout     = (values.get('DB_CONNECT_TIMEOUT_MOR') or '').strip()

    profile = ConnectionProfile(
        ssh_host           = values['DB_SSH_IP_MOR'].strip(),
        ssh_port           = _int(values, 'DB_SSH_PORT_MOR', 22),
        ssh_user           = values['DB_SSH_USER_MOR'].strip(),
        ssh_key_path       = Path(values['DB_SSH_KEY_MOR'].strip()).expanduser(),
        ssh_key_passphrase = values.get('DB_SSH_KEY_PASS_MOR') or None,
        db_host            = values['DB_IP_MOR'].strip(),
        db_port            = _int(values, 'DB_PORT_MOR', 3306),
        db_name            = values['DB_NAME_MOR'].strip(),
        db_user            = values['DB_USER_MOR'].strip(),
        db_password        = values['DB_PASS_MOR'],
        host_key_policy    = policy,
        known_hosts_path   = Path(known_hosts).expanduser() if known_hosts else None,
        connect_timeout    = _float(timeout, 'DB_CONNECT_TIMEOUT_MOR') if timeout else None,
    )

    decimals = (values.get('MOR_AVERAGE_DECIMALS') or '').strip()

    return Settings(
        profile          = profile,
        device_groups    = parse_device_groups(values.get('MOR_DEVICE_GROUPS') or DEFAULT_DEVICE_GROUPS),
        provider_ids     = parse_id_list(values.get('MOR_PROVIDER_IDS') or DEFAULT_PROVIDER_IDS,
                                         'MOR_PROVIDER_IDS'),
        average_decimals = _int(values, 'MOR_AVERAGE_DECIMALS', None) if decimals else None,
    )


# ── PARSERS ──────────────────────────────────────────────────

def parse_device_groups(text: str) -> Tuple[Tuple[str, Tuple[int, ...]], ...]:
    """'EN:181,1081;FR:671,1072' -> (('EN', (181, 1081)), ('FR', (671, 1072)))"""
    groups = []
    for chunk in text.split(';'):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, ids = chunk.partition(':')
        if not sep or not name.strip():
            raise ConfigError(f"MOR_DEVICE_GROUPS: expected NAME:id,id got {chunk!r}")
        groups.append((name.strip(), parse_id_list(ids, 'MOR_DEVICE_GROUPS')))
    if not groups:
        raise ConfigError("MOR_DEVICE_GROUPS is empty")
    return tuple(groups)


def parse_id_list(text: str, key: str) -> Tuple[int, ...]:
    try:
        ids = tuple(int(part) for part in text.split(',') if part.strip())
    except ValueError as e:
        raise ConfigError(f"{key}: ids must be integers ({e})") from e
    if not ids:
        raise ConfigError(f"{key} is empty")
    return ids


def _int(values: Mapping[str, Optional[str]], key: str, default: Optional[int]) -> Optional[int]:
    raw = (values.get(key) or '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def _float(raw: str, key: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e
