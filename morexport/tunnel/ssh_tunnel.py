"""
morexport/tunnel/ssh_tunnel.py
Single-hop SSH tunnel to the MOR jump host.

The tunnel is only a byte relay: each dial() opens a direct-tcpip channel
through the SSH session. Nothing is executed on the remote host.

HOST KEYS (DB_SSH_HOST_KEY_POLICY_MOR):
  ignore  accept any host key; known_hosts is not consulted (historical behavior)
  warn    check known_hosts, log unknown keys and continue
  strict  check known_hosts, refuse unknown keys
A key that contradicts a known_hosts entry is refused under warn and strict.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Tuple

import paramiko

from morexport.config import ConnectionProfile
from morexport.errors import ConfigError, SSHKeyError, TunnelError

logger = logging.getLogger(__name__)

# Tried in order; each raises SSHException on a key of another type.
KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)

HOST_KEY_POLICY_CLASSES = {
    'ignore': paramiko.AutoAddPolicy,
    'warn':   paramiko.WarningPolicy,
    'strict': paramiko.RejectPolicy,
}

ORIGIN_ADDRESS = ('127.0.0.1', 0)


class Dialer(Protocol):
    """Anything that can open a socket-like stream to (host, port)."""

    def dial(self, address: Tuple[str, int]):
        ...


# ── PRIVATE KEY ──────────────────────────────────────────────

def load_private_key(path: Path, passphrase: Optional[str] = None) -> paramiko.PKey:
    """
    Load an OpenSSH/PEM private key, decrypting it when a passphrase is set.
    Raises SSHKeyError for unreadable files, missing or wrong passphrases.
    """
    path = Path(path)
    if not path.is_file():
        raise SSHKeyError(f"SSH private key not found: {path}")

    last_error: Optional[Exception] = None
    for key_class in KEY_CLASSES:
        try:
            return key_class.from_private_key_file(str(path), password=passphrase)
        except paramiko.PasswordRequiredException as e:
            raise SSHKeyError(f"SSH private key {path} is encrypted and no passphrase is set") from e
        except OSError as e:
            raise SSHKeyError(f"Cannot read SSH private key {path}: {e}") from e
        except (paramiko.SSHException, ValueError, TypeError) as e:
            last_error = e

    raise SSHKeyError(
        f"Cannot load SSH private key {path} (wrong passphrase or unsupported key type): {last_error}"
    ) from last_error


# ── TUNNEL ───────────────────────────────────────────────────

class SSHTunnel:
    """An authenticated SSH session used as a Dialer."""

    def __init__(self, client: paramiko.SSHClient, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    @classmethod
    def open(cls, profile: ConnectionProfile) -> 'SSHTunnel':
        key    = load_private_key(profile.ssh_key_path, profile.ssh_key_passphrase)
        client = paramiko.SSHClient()
        try:
            _apply_host_key_policy(client, profile)
            logger.info(f"Opening SSH tunnel to {profile.ssh_user}@{profile.ssh_host}:{profile.ssh_port}")
            client.connect(
                hostname      = profile.ssh_host,
                port          = profile.ssh_port,
                username      = profile.ssh_user,
                pkey          = key,
                look_for_keys = False,
                allow_agent   = False,
                timeout       = profile.connect_timeout,
            )
        except ConfigError:
            client.close()
            raise
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise TunnelError(
                f"SSH connection to {profile.ssh_host}:{profile.ssh_port} failed: {e}"
            ) from e
        return cls(client, timeout=profile.connect_timeout)

    def dial(self, address: Tuple[str, int]) -> paramiko.Channel:
        """Open a TCP stream to `address` as seen from the jump host."""
        transport = self._client.get_transport()
        if transport is None or not transport.is_active():
            raise TunnelError("SSH session is closed")
        try:
            channel = transport.open_channel(
                'direct-tcpip', tuple(address), ORIGIN_ADDRESS, timeout=self._timeout,
            )
        except (paramiko.SSHException, OSError) as e:
            raise TunnelError(f"Cannot reach {address[0]}:{address[1]} through SSH: {e}") from e
        logger.debug(f"Tunnel channel open to {address[0]}:{address[1]}")
        return channel

    def close(self) -> None:
        self._client.close()
        logger.debug("SSH tunnel closed")

    def __enter__(self) -> 'SSHTunnel':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _apply_host_key_policy(client: paramiko.SSHClient, profile: ConnectionProfile) -> None:
    policy = profile.host_key_policy
    if policy != 'ignore':
        try:
            client.load_system_host_keys()
            if profile.known_hosts_path is not None:
                client.load_host_keys(str(profile.known_hosts_path))
        except OSError as e:
            raise ConfigError(f"Cannot read known hosts file: {e}") from e
    client.set_missing_host_key_policy(HOST_KEY_POLICY_CLASSES[policy]())
