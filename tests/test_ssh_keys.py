import os

import pytest

from pmxdeploy.ssh_keys import resolve_ssh_key, ssh_key_file


KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIFakeKeyMaterial user@host"


def test_empty_field_means_no_key():
    assert resolve_ssh_key("") is None


def test_literal_key_is_used_verbatim():
    assert resolve_ssh_key(KEY) == KEY


def test_path_is_read_without_trailing_newline(tmp_path):
    key_file = tmp_path / "id_ed25519.pub"
    key_file.write_text(KEY + "\n")
    assert resolve_ssh_key(str(key_file)) == KEY


def test_path_without_newline_is_read_as_is(tmp_path):
    key_file = tmp_path / "id_ed25519.pub"
    key_file.write_text(KEY)
    assert resolve_ssh_key(str(key_file)) == KEY


def test_tilde_is_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    (tmp_path / ".ssh").mkdir()
    (tmp_path / ".ssh" / "id_rsa.pub").write_text(KEY + "\n")
    assert resolve_ssh_key("~/.ssh/id_rsa.pub") == KEY


def test_missing_path_is_treated_as_key_text(tmp_path):
    raw = str(tmp_path / "nope.pub")
    assert resolve_ssh_key(raw) == raw


def test_multiline_literal_written_without_trailing_newline():
    material = KEY + "\n" + KEY.replace("user@host", "other@host")
    with ssh_key_file(material) as path:
        with open(path) as f:
            assert f.read() == material
    assert not os.path.exists(path)


def test_no_material_yields_none():
    with ssh_key_file(None) as path:
        assert path is None


def test_temp_file_removed_on_error():
    with pytest.raises(RuntimeError):
        with ssh_key_file(KEY) as path:
            assert os.path.exists(path)
            raise RuntimeError("deploy failed")
    assert not os.path.exists(path)
