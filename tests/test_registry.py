import logging

import pytest
import yaml

from keyconf.registry import ConfigRegistry
from keyconf.repositories import StoreIOError, StoreParseError

from conftest import break_save


def read_yaml(path):
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def test_new_registry_is_empty(tmp_path):
    registry = ConfigRegistry(tmp_path)
    assert len(registry) == 0
    assert registry.defaults == {}
    assert registry.base_directory == tmp_path.absolute()
    assert registry.get("p1") is None


def test_sub_directories_join_base(tmp_path):
    registry = ConfigRegistry(tmp_path, "sessions")
    registry.register("p1", "p1")
    assert registry.get("p1").path == (tmp_path / "sessions" / "p1.yml").absolute()


def test_register_twice_keeps_first_store(registry):
    assert registry.register("p1", "p1") is True
    first = registry.get("p1")
    assert registry.register("p1", "p1") is False
    assert registry.get("p1") is first
    assert registry.is_registered("p1")
    assert "p1" in registry
    assert registry.keys() == ["p1"]


def test_overwrite_replaces_without_saving(registry):
    registry.register("p1", "p1")
    old = registry.get("p1")
    old.set("volume", 5)

    assert registry.register("p1", "p1", overwrite=True) is True
    new = registry.get("p1")
    assert new is not old
    assert new.get("volume") is None
    assert read_yaml(old.path) == {}


def test_deregister_then_get_is_none(registry):
    registry.register("p1", "p1")
    store = registry.get("p1")
    assert registry.deregister("p1") is store
    assert registry.get("p1") is None
    assert not registry.is_registered("p1")
    assert registry.deregister("p1") is None


def test_deregister_does_not_save(registry):
    registry.register("p1", "p1")
    store = registry.get("p1")
    store.set("volume", 9)
    registry.deregister("p1")
    assert read_yaml(store.path) == {}


def test_scenario_defaults_on_new_file(tmp_path):
    registry = ConfigRegistry(tmp_path)
    registry.add_default("volume", 100)

    assert registry.register("p1", "p1") is True
    path = tmp_path / "p1.yml"
    assert read_yaml(path) == {"volume": 100}
    before = path.read_text(encoding="utf-8")

    assert registry.register("p1", "p1") is False
    assert path.read_text(encoding="utf-8") == before

    store = registry.deregister("p1")
    assert store is not None
    assert registry.get("p1") is None


def test_scenario_later_default_does_not_override(tmp_path):
    registry = ConfigRegistry(tmp_path)
    registry.register("p2", "p2")
    store = registry.get("p2")
    store.set("volume", 50)
    registry.add_default("volume", 100)
    store.save()

    assert read_yaml(tmp_path / "p2.yml") == {"volume": 50}
    assert registry.get("p2").get("volume") == 50


def test_defaults_not_retroactive(registry):
    registry.register("p1", "p1")
    registry.add_defaults({"volume": 100, "audio.muted": True})
    registry.register("p2", "p2")

    assert registry.get("p1").get("volume") is None
    assert registry.get("p2").get("volume") == 100
    assert registry.get("p2").get("audio.muted") is True


def test_existing_file_keeps_values_and_is_not_rewritten(tmp_path):
    (tmp_path / "p1.yml").write_text("# mine\nvolume: 3\n", encoding="utf-8")
    registry = ConfigRegistry(tmp_path)
    registry.add_default("volume", 100)
    registry.add_default("lang", "en")

    registry.register("p1", "p1")
    store = registry.get("p1")
    assert store.get("volume") == 3
    assert store.get("lang") == "en"
    assert (tmp_path / "p1.yml").read_text(encoding="utf-8") == "# mine\nvolume: 3\n"


def test_defaults_are_snapshots(registry):
    value = {"a": 1}
    registry.add_default("section", value)
    value["a"] = 2
    registry.register("p1", "p1")
    assert registry.get("p1").get("section") == {"a": 1}


def test_register_propagates_parse_error(tmp_path):
    (tmp_path / "bad.yml").write_text("a: [\n", encoding="utf-8")
    registry = ConfigRegistry(tmp_path)
    with pytest.raises(StoreParseError):
        registry.register("bad", "bad")
    assert not registry.is_registered("bad")


def test_register_failure_keeps_previous_store(tmp_path):
    registry = ConfigRegistry(tmp_path)
    registry.register("k", "good")
    good = registry.get("k")
    (tmp_path / "bad.yml").write_text("a: [\n", encoding="utf-8")
    with pytest.raises(StoreParseError):
        registry.register("k", "bad", overwrite=True)
    assert registry.get("k") is good


def test_save_all(registry):
    for key in ("p1", "p2"):
        registry.register(key, key)
        registry.get(key).set("owner", key)
    registry.save_all()
    for key in ("p1", "p2"):
        assert read_yaml(registry.base_directory / f"{key}.yml") == {"owner": key}


def test_save_all_surfaces_failure(registry):
    registry.register("p1", "p1")
    registry.register("p2", "p2")
    break_save(registry.get("p2"))
    with pytest.raises(StoreIOError):
        registry.save_all()
    assert len(registry) == 2


def test_dotted_default_never_replaces_user_scalar(tmp_path):
    (tmp_path / "p1.yml").write_text("audio: loud\n", encoding="utf-8")
    registry = ConfigRegistry(tmp_path)
    registry.add_default("audio.volume", 100)

    registry.register("p1", "p1")
    store = registry.get("p1")
    store.save()
    assert read_yaml(tmp_path / "p1.yml") == {"audio": "loud"}


def test_keys_sharing_a_file_are_logged(registry, caplog):
    registry.register("v1.2", "v1.2")
    with caplog.at_level(logging.WARNING, logger="keyconf.registry"):
        registry.register("v1.3", "v1.3")
    assert registry.get("v1.2").path == registry.get("v1.3").path
    assert "shares" in caplog.text
