import pytest

from pmxdeploy.config import Config, ConfigError


def test_defaults_match_built_in_constants():
    config = Config()
    assert config.storage == "PMX-SSD"
    assert config.search_domain == "local"
    assert config.disk == "scsi0"
    assert config.defaults.cpu_cores == 2
    assert config.defaults.memory_gib == 4
    assert config.defaults.disk_gib == 20
    assert config.defaults.username == "admin"
    assert config.defaults.dns_server == "8.8.8.8"


def test_missing_file_uses_defaults(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "CONFIG_PATHS", [tmp_path / "config.yaml"])
    assert Config.load() == Config()


def test_load_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "storage: local-zfs\n"
        "search_domain: lab.example\n"
        "disk: virtio0\n"
        "lock_timeout: 60\n"
        "defaults:\n"
        "  cpu_cores: 4\n"
        "  username: ops\n"
    )
    config = Config.load(path)
    assert config.storage == "local-zfs"
    assert config.search_domain == "lab.example"
    assert config.disk == "virtio0"
    assert config.lock_timeout == 60.0
    assert config.defaults.cpu_cores == 4
    assert config.defaults.username == "ops"
    assert config.defaults.memory_gib == 4


def test_find_config_file_returns_first_existing(monkeypatch, tmp_path):
    first = tmp_path / "a.yaml"
    second = tmp_path / "b.yaml"
    second.write_text("storage: x\n")
    monkeypatch.setattr(Config, "CONFIG_PATHS", [first, second])
    assert Config.find_config_file() == second


def test_malformed_yaml_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to read"):
        Config.load(path)


def test_non_mapping_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        Config.load(path)


def test_bad_number_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("defaults:\n  cpu_cores: lots\n")
    with pytest.raises(ConfigError, match="Invalid value"):
        Config.load(path)


def test_empty_storage_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("storage: ''\n")
    with pytest.raises(ConfigError, match="Storage pool"):
        Config.load(path)
