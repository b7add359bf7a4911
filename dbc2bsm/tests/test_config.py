import json
import logging

import pytest

from dbc2bsm.config import BsmSettings, ConfigManager, configure_logging
from dbc2bsm.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # keep the user's ~/.dbc2bsm/config.json and env out of the tests
    monkeypatch.setenv('HOME', str(tmp_path))
    for name in ('DBC2BSM_IP_ADDRESS', 'DBC2BSM_PORT', 'DBC2BSM_BAUDRATE', 'DBC2BSM_LIBRARY',
                 'DBC2BSM_TIMESTAMPS', 'DBC2BSM_OVERSIZE_POLICY', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


def test_defaults_are_valid():
    cfg = ConfigManager()
    assert cfg.validate() == []
    assert cfg.bsm_settings.baudrate == 250000
    assert cfg.bsm_settings.ip_address == '<CAN Device>'
    assert cfg.bsm_settings.oversize_policy == 'reject'
    assert cfg.bsm_settings.include_timestamp is False
    assert cfg.config_file is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('DBC2BSM_BAUDRATE', '500000')
    monkeypatch.setenv('DBC2BSM_PORT', '3')
    monkeypatch.setenv('DBC2BSM_TIMESTAMPS', 'yes')
    monkeypatch.setenv('DBC2BSM_OVERSIZE_POLICY', 'CLAMP')
    monkeypatch.setenv('LOG_LEVEL', 'debug')
    cfg = ConfigManager()
    assert cfg.bsm_settings.baudrate == 500000
    assert cfg.bsm_settings.port == 3
    assert cfg.bsm_settings.include_timestamp is True
    assert cfg.bsm_settings.oversize_policy == 'clamp'
    assert cfg.app_settings.log_level == 'DEBUG'


def test_invalid_environment_number_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv('DBC2BSM_BAUDRATE', 'fast')
    with caplog.at_level(logging.WARNING):
        cfg = ConfigManager()
    assert cfg.bsm_settings.baudrate == 250000
    assert 'DBC2BSM_BAUDRATE' in caplog.text


def test_file_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv('DBC2BSM_BAUDRATE', '500000')
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({
        'bsm_settings': {'baudrate': 125000, 'ip_address': '192.168.0.7', 'include_timestamp': True},
        'app_settings': {'log_level': 'warning'},
    }), encoding='utf-8')
    cfg = ConfigManager(str(path))
    assert cfg.bsm_settings.baudrate == 125000
    assert cfg.bsm_settings.ip_address == '192.168.0.7'
    assert cfg.bsm_settings.include_timestamp is True
    assert cfg.app_settings.log_level == 'WARNING'
    assert cfg.config_file == str(path)


@pytest.mark.parametrize('raw, expected', [
    ('false', False), ('no', False), ('True', True), ('1', True), (False, False), (1, True),
])
def test_file_timestamp_flag_parsing(tmp_path, raw, expected):
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({'bsm_settings': {'include_timestamp': raw}}), encoding='utf-8')
    assert ConfigManager(str(path)).bsm_settings.include_timestamp is expected


def test_broken_file_keeps_defaults(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text('{not json', encoding='utf-8')
    cfg = ConfigManager(str(path))
    assert cfg.bsm_settings == BsmSettings()
    assert cfg.config_file is None


def test_user_config_location_is_used(tmp_path):
    user_dir = tmp_path / '.dbc2bsm'
    user_dir.mkdir()
    (user_dir / 'config.json').write_text(json.dumps({'bsm_settings': {'port': 1}}), encoding='utf-8')
    cfg = ConfigManager()
    assert cfg.bsm_settings.port == 1


def test_save_and_reload_round_trip(tmp_path):
    cfg = ConfigManager()
    cfg.bsm_settings.library = 'Other.dll'
    cfg.bsm_settings.oversize_policy = 'clamp'
    target = tmp_path / 'out' / 'config.json'
    assert cfg.save_to_file(str(target)) is True
    reloaded = ConfigManager(str(target))
    assert reloaded.bsm_settings == cfg.bsm_settings


def test_validation_reports_every_bad_value():
    settings = BsmSettings(port=7, baudrate=123, max_bytes_to_generate=0, oversize_policy='ignore')
    errors = settings.validate()
    assert len(errors) == 4


def test_require_valid_raises(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({'bsm_settings': {'baudrate': 1}}), encoding='utf-8')
    cfg = ConfigManager(str(path))
    with pytest.raises(ConfigurationError):
        cfg.require_valid()


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging('debug')
        assert root.level == logging.DEBUG
        configure_logging('nonsense')
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
