"""
tests/test_config.py
Settings loading from dotenv + environment, and the list parsers.
"""

from pathlib import Path

import pytest

from morexport.config import (
    DEFAULT_PROVIDER_IDS,
    load_settings,
    parse_device_groups,
    parse_id_list,
    settings_from_mapping,
)
from morexport.errors import ConfigError

BASE = {
    'DB_IP_MOR':       '10.0.0.5',
    'DB_NAME_MOR':     'mor',
    'DB_USER_MOR':     'reporter',
    'DB_PASS_MOR':     's3cret',
    'DB_SSH_IP_MOR':   'jump.example.net',
    'DB_SSH_USER_MOR': 'tunnel',
    'DB_SSH_KEY_MOR':  '/keys/id_ed25519',
}


class TestSettingsFromMapping:

    def test_defaults(self):
        s = settings_from_mapping(BASE)
        assert s.profile.ssh_port == 22
        assert s.profile.db_port == 3306
        assert s.profile.db_address == ('10.0.0.5', 3306)
        assert s.profile.ssh_key_path == Path('/keys/id_ed25519')
        assert s.profile.ssh_key_passphrase is None
        assert s.profile.host_key_policy == 'ignore'
        assert s.profile.connect_timeout is None
        assert s.device_groups == (('EN', (181, 1081)), ('FR', (671, 1072)))
        assert s.provider_ids == parse_id_list(DEFAULT_PROVIDER_IDS, 'x')
        assert s.average_decimals is None

    def test_overrides(self):
        s = settings_from_mapping({
            **BASE,
            'DB_PORT_MOR':                '3307',
            'DB_SSH_PORT_MOR':            '2222',
            'DB_SSH_KEY_PASS_MOR':        'phrase',
            'DB_SSH_HOST_KEY_POLICY_MOR': 'STRICT',
            'DB_SSH_KNOWN_HOSTS_MOR':     '/etc/ssh/known',
            'DB_CONNECT_TIMEOUT_MOR':     '7.5',
            'MOR_DEVICE_GROUPS':          'ALL:1,2,3',
            'MOR_PROVIDER_IDS':           '9',
            'MOR_AVERAGE_DECIMALS':       '3',
        })
        assert s.profile.db_port == 3307
        assert s.profile.ssh_port == 2222
        assert s.profile.ssh_key_passphrase == 'phrase'
        assert s.profile.host_key_policy == 'strict'
        assert s.profile.known_hosts_path == Path('/etc/ssh/known')
        assert s.profile.connect_timeout == 7.5
        assert s.device_groups == (('ALL', (1, 2, 3)),)
        assert s.provider_ids == (9,)
        assert s.average_decimals == 3

    @pytest.mark.parametrize('key', ['DB_IP_MOR', 'DB_PASS_MOR', 'DB_SSH_KEY_MOR'])
    def test_missing_required_key(self, key):
        values = {k: v for k, v in BASE.items() if k != key}
        with pytest.raises(ConfigError, match=key):
            settings_from_mapping(values)

    def test_blank_counts_as_missing(self):
        with pytest.raises(ConfigError, match='DB_USER_MOR'):
            settings_from_mapping({**BASE, 'DB_USER_MOR': '  '})

    def test_bad_port(self):
        with pytest.raises(ConfigError, match='DB_PORT_MOR'):
            settings_from_mapping({**BASE, 'DB_PORT_MOR': 'mysql'})

    def test_bad_policy(self):
        with pytest.raises(ConfigError, match='DB_SSH_HOST_KEY_POLICY_MOR'):
            settings_from_mapping({**BASE, 'DB_SSH_HOST_KEY_POLICY_MOR': 'trust-me'})

    def test_repr_hides_secrets(self):
        profile = settings_from_mapping({**BASE, 'DB_SSH_KEY_PASS_MOR': 'phrase'}).profile
        text = repr(profile)
        assert 's3cret' not in text
        assert 'phrase' not in text
        assert 'jump.example.net' in text


class TestParsers:

    def test_device_groups(self):
        assert parse_device_groups(' EN:181, 1081 ; FR:671,1072 ;') == (
            ('EN', (181, 1081)),
            ('FR', (671, 1072)),
        )

    @pytest.mark.parametrize('text', ['EN181', ':1,2', 'EN:', 'EN:a,b', ';'])
    def test_device_groups_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_device_groups(text)

    def test_id_list(self):
        assert parse_id_list('561, 721,21', 'MOR_PROVIDER_IDS') == (561, 721, 21)

    def test_id_list_invalid(self):
        with pytest.raises(ConfigError, match='MOR_PROVIDER_IDS'):
            parse_id_list('561,x', 'MOR_PROVIDER_IDS')


class TestLoadSettings:

    def _write_env(self, path: Path, values: dict) -> Path:
        path.write_text(''.join(f"{k}={v}\n" for k, v in values.items()), encoding='utf-8')
        return path

    def test_explicit_file(self, tmp_path):
        env = self._write_env(tmp_path / 'prod.env', BASE)
        s = load_settings(env, environ={})
        assert s.profile.db_name == 'mor'

    def test_explicit_file_missing(self, tmp_path):
        with pytest.raises(ConfigError, match='not found'):
            load_settings(tmp_path / 'nope.env', environ={})

    def test_default_file_in_cwd(self, tmp_path, monkeypatch):
        self._write_env(tmp_path / '.env', BASE)
        monkeypatch.chdir(tmp_path)
        assert load_settings(environ={}).profile.ssh_user == 'tunnel'

    def test_environment_only(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_settings(environ=BASE).profile.db_host == '10.0.0.5'

    def test_environment_overrides_file(self, tmp_path):
        env = self._write_env(tmp_path / 'prod.env', BASE)
        s = load_settings(env, environ={'DB_NAME_MOR': 'mor_archive', 'MOR_PROVIDER_IDS': '5'})
        assert s.profile.db_name == 'mor_archive'
        assert s.provider_ids == (5,)

    def test_unrelated_environment_ignored(self, tmp_path):
        env = self._write_env(tmp_path / 'prod.env', BASE)
        s = load_settings(env, environ={'DB_NAME': 'other', 'HOME': '/root'})
        assert s.profile.db_name == 'mor'

    def test_nothing_configured(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match='Missing required settings'):
            load_settings(environ={})
