import json

import pytest

from mongotree.core.config import AppConfig, ConfigManager, MongoSettings, TreeSettings


def test_config_defaults_written(tmp_path):
    path = tmp_path / "config.json"
    manager = ConfigManager(str(path))

    assert manager.data.tree.bucket_name == "fs"
    assert manager.data.tree.resolved_root_name == "folders"
    assert json.loads(path.read_text())["mongo"]["database_name"] == "mongotree"


def test_config_load_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"tree": {"folder_collection_name": "dirs", "root_name": "home"}}))

    manager = ConfigManager(str(path))
    assert manager.get("tree", "folder_collection_name") == "dirs"
    assert manager.data.tree.resolved_root_name == "home"


def test_config_load_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[mongo]\nuri = "mongodb://db.internal:27018"\n\n[tree]\nchunk_size_bytes = 4096\n')

    manager = ConfigManager(str(path))
    assert manager.data.mongo.connection_url == "mongodb://db.internal:27018"
    assert manager.data.tree.chunk_size_bytes == 4096


def test_config_broken_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    manager = ConfigManager(str(path))
    assert manager.data == AppConfig()
    assert path.read_text() == "{not json"


def test_config_update_persists(tmp_path):
    path = tmp_path / "config.json"
    manager = ConfigManager(str(path))

    manager.update("tree", "bucket_name", "archive")

    assert manager.data.tree.bucket_name == "archive"
    assert ConfigManager(str(path)).data.tree.bucket_name == "archive"


def test_config_update_rejects_bad_input(tmp_path):
    manager = ConfigManager(str(tmp_path / "config.json"))

    with pytest.raises(ValueError):
        manager.update("nosuch", "key", 1)
    with pytest.raises(ValueError):
        manager.update("tree", "nosuch", 1)
    with pytest.raises(ValueError):
        manager.update("tree", "chunk_size_bytes", 0)
    assert manager.data.tree.chunk_size_bytes == 1048576


def test_mongo_connection_url():
    assert MongoSettings().connection_url == "mongodb://localhost:27017"
    assert MongoSettings(host="db", port=1).connection_url == "mongodb://db:1"


def test_tree_settings_validation():
    with pytest.raises(ValueError):
        TreeSettings(chunk_size_bytes=-5)
