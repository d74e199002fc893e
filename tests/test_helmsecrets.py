import base64

import pytest
import yaml

from jxsecret.helmsecrets import HelmSecretCache


def _write_secret(folder, namespace, name, document):
    path = folder / namespace / f"{name}.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document), encoding="utf-8")
    return path


def _b64(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def test_reads_base64_data(tmp_path):
    _write_secret(
        tmp_path,
        "jx",
        "nexus",
        {"apiVersion": "v1", "kind": "Secret", "data": {"username": _b64("admin")}},
    )
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == "admin"


def test_string_data_overrides_data(tmp_path):
    _write_secret(
        tmp_path,
        "jx",
        "nexus",
        {"data": {"username": _b64("admin")}, "stringData": {"username": "root"}},
    )
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == "root"


def test_missing_entry_is_empty(tmp_path):
    _write_secret(tmp_path, "jx", "nexus", {"stringData": {"username": "admin"}})
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "other") == ""


def test_missing_file_is_empty_and_cached(tmp_path):
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == ""
    assert cache.values["jx/nexus"] == {}
    # a file written afterwards is not read again
    _write_secret(tmp_path, "jx", "nexus", {"stringData": {"username": "admin"}})
    assert cache.value("jx", "nexus", "username") == ""


def test_file_read_once(tmp_path):
    path = _write_secret(tmp_path, "jx", "nexus", {"stringData": {"username": "admin"}})
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == "admin"
    path.unlink()
    assert cache.value("jx", "nexus", "username") == "admin"


def test_disabled_folder_ignores_files(tmp_path):
    _write_secret(tmp_path, "jx", "nexus", {"stringData": {"username": "admin"}})
    cache = HelmSecretCache(folder=tmp_path, disable_secret_folder=True)
    assert cache.value("jx", "nexus", "username") == ""
    assert "jx/nexus" not in cache.values


def test_preloaded_values_are_used(tmp_path):
    cache = HelmSecretCache(
        folder=tmp_path,
        disable_secret_folder=True,
        values={"jx/nexus": {"username": "admin"}},
    )
    assert cache.value("jx", "nexus", "username") == "admin"


def test_namespaces_are_separate(tmp_path):
    _write_secret(tmp_path, "jx", "nexus", {"stringData": {"username": "admin"}})
    _write_secret(tmp_path, "jx-staging", "nexus", {"stringData": {"username": "root"}})
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == "admin"
    assert cache.value("jx-staging", "nexus", "username") == "root"


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "jx" / "nexus.yaml"
    path.parent.mkdir(parents=True)
    path.write_text("data: [unclosed", encoding="utf-8")
    cache = HelmSecretCache(folder=tmp_path)
    with pytest.raises(ValueError):
        cache.value("jx", "nexus", "username")


def test_invalid_base64_raises(tmp_path):
    _write_secret(tmp_path, "jx", "nexus", {"data": {"username": "!!not base64!!"}})
    cache = HelmSecretCache(folder=tmp_path)
    with pytest.raises(ValueError):
        cache.value("jx", "nexus", "username")


def test_empty_file_gives_empty_values(tmp_path):
    path = tmp_path / "jx" / "nexus.yaml"
    path.parent.mkdir(parents=True)
    path.write_text("", encoding="utf-8")
    cache = HelmSecretCache(folder=tmp_path)
    assert cache.value("jx", "nexus", "username") == ""
    assert cache.values["jx/nexus"] == {}