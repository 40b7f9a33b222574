"""
tests/test_ssh_tunnel.py
Private key loading, host key policy and dial errors. No SSH server involved.
"""

import paramiko
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from morexport.config import settings_from_mapping
from morexport.errors import SSHKeyError, TunnelError
from morexport.tunnel.ssh_tunnel import SSHTunnel, _apply_host_key_policy, load_private_key


def _profile(**extra):
    return settings_from_mapping({
        'DB_IP_MOR':       '10.0.0.5',
        'DB_NAME_MOR':     'mor',
        'DB_USER_MOR':     'reporter',
        'DB_PASS_MOR':     's3cret',
        'DB_SSH_IP_MOR':   'jump.example.net',
        'DB_SSH_USER_MOR': 'tunnel',
        'DB_SSH_KEY_MOR':  '/nonexistent/id_ed25519',
        **extra,
    }).profile


@pytest.fixture(scope='module')
def encrypted_key(tmp_path_factory):
    path = tmp_path_factory.mktemp('keys') / 'id_rsa'
    paramiko.RSAKey.generate(2048).write_private_key_file(str(path), password='phrase')
    return path


@pytest.fixture(scope='module')
def encrypted_openssh_key(tmp_path_factory):
    path = tmp_path_factory.mktemp('keys') / 'id_ed25519'
    path.write_bytes(Ed25519PrivateKey.generate().private_bytes(
        encoding             = serialization.Encoding.PEM,
        format               = serialization.PrivateFormat.OpenSSH,
        encryption_algorithm = serialization.BestAvailableEncryption(b'phrase'),
    ))
    return path


class TestLoadPrivateKey:

    def test_missing_file(self, tmp_path):
        with pytest.raises(SSHKeyError, match='not found'):
            load_private_key(tmp_path / 'id_missing')

    def test_not_a_key(self, tmp_path):
        path = tmp_path / 'id_garbage'
        path.write_text('this is not a key\n')
        with pytest.raises(SSHKeyError, match='Cannot load'):
            load_private_key(path)

    def test_encrypted_without_passphrase(self, encrypted_key):
        with pytest.raises(SSHKeyError, match='no passphrase'):
            load_private_key(encrypted_key)

    def test_wrong_passphrase_pem(self, encrypted_key):
        with pytest.raises(SSHKeyError, match='wrong passphrase'):
            load_private_key(encrypted_key, 'not-the-phrase')

    def test_wrong_passphrase_openssh(self, encrypted_openssh_key):
        with pytest.raises(SSHKeyError, match='wrong passphrase'):
            load_private_key(encrypted_openssh_key, 'not-the-phrase')

    def test_openssh_with_passphrase(self, encrypted_openssh_key):
        key = load_private_key(encrypted_openssh_key, 'phrase')
        assert isinstance(key, paramiko.Ed25519Key)

    def test_encrypted_with_passphrase(self, encrypted_key):
        key = load_private_key(encrypted_key, 'phrase')
        assert isinstance(key, paramiko.RSAKey)


class TestSSHTunnel:

    def test_open_fails_on_key_before_connecting(self):
        with pytest.raises(SSHKeyError):
            SSHTunnel.open(_profile())

    def test_dial_on_closed_session(self):
        class NoTransport:
            def get_transport(self):
                return None

        with pytest.raises(TunnelError, match='closed'):
            SSHTunnel(NoTransport()).dial(('10.0.0.5', 3306))

    def test_dial_channel_failure(self):
        class Transport:
            def is_active(self):
                return True

            def open_channel(self, kind, dest, origin, timeout=None):
                raise paramiko.ChannelException(2, 'Connect failed')

        class Client:
            def get_transport(self):
                return Transport()

        with pytest.raises(TunnelError, match='10.0.0.5:3306'):
            SSHTunnel(Client()).dial(('10.0.0.5', 3306))


class RecordingClient:
    def __init__(self):
        self.loaded = []
        self.policy = None

    def load_system_host_keys(self):
        self.loaded.append('system')

    def load_host_keys(self, filename):
        self.loaded.append(filename)

    def set_missing_host_key_policy(self, policy):
        self.policy = policy


class TestHostKeyPolicy:

    def test_ignore_skips_known_hosts(self):
        client = RecordingClient()
        _apply_host_key_policy(client, _profile())
        assert client.loaded == []
        assert isinstance(client.policy, paramiko.AutoAddPolicy)

    def test_warn(self):
        client = RecordingClient()
        _apply_host_key_policy(client, _profile(DB_SSH_HOST_KEY_POLICY_MOR='warn'))
        assert client.loaded == ['system']
        assert isinstance(client.policy, paramiko.WarningPolicy)

    def test_strict_with_known_hosts(self):
        client = RecordingClient()
        _apply_host_key_policy(client, _profile(
            DB_SSH_HOST_KEY_POLICY_MOR='strict',
            DB_SSH_KNOWN_HOSTS_MOR='/etc/mor/known_hosts',
        ))
        assert client.loaded == ['system', '/etc/mor/known_hosts']
        assert isinstance(client.policy, paramiko.RejectPolicy)
