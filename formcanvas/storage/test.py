"""Tests for schema persistence."""

import json

import pytest

from formcanvas.config import get_storage_key
from formcanvas.schema import FormSchema

from .lib import (
    JsonFileStorage,
    MemoryStorage,
    SchemaLoadError,
    dump_schema,
    dumps_schema,
    loads_schema,
    parse_schema,
)


class TestCodec:
    """Tests for the persisted record format."""

    @pytest.mark.unit
    def test_round_trip(self, sample_schema):
        """Serializing and parsing back preserves every attribute and order."""
        restored = loads_schema(dumps_schema(sample_schema))
        assert restored == sample_schema
        assert dump_schema(restored) == dump_schema(sample_schema)

    @pytest.mark.unit
    def test_dump_is_plain_json(self, sample_schema):
        data = dump_schema(sample_schema)
        assert json.loads(json.dumps(data)) == data
        assert isinstance(data["sections"], list)

    @pytest.mark.unit
    def test_parse_minimal_record(self):
        schema = parse_schema({"id": "f", "name": "", "sections": []})
        assert schema == FormSchema(id="f")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload",
        [
            pytest.param({"name": "no id"}, id="missing-id"),
            pytest.param({"id": "f", "sections": "nope"}, id="sections-not-list"),
            pytest.param(
                {
                    "id": "f",
                    "sections": [
                        {
                            "id": "s",
                            "title": "",
                            "rows": [
                                {
                                    "id": "r",
                                    "columns": [
                                        {
                                            "id": "c",
                                            "span": 4,
                                            "fields": [
                                                {"id": "x", "type": "slider", "name": "x"}
                                            ],
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                },
                id="bad-field-type",
            ),
            pytest.param(
                {"id": "f", "sections": [{"id": "s", "title": "", "version": 2}]},
                id="unknown-key",
            ),
            pytest.param([], id="not-an-object"),
        ],
    )
    def test_malformed_payload(self, payload):
        with pytest.raises(SchemaLoadError) as excinfo:
            parse_schema(payload, key="k")
        assert excinfo.value.key == "k"
        assert excinfo.value.cause is not None

    @pytest.mark.unit
    def test_invalid_json(self):
        with pytest.raises(SchemaLoadError, match="not valid JSON"):
            loads_schema("{not json")


class TestJsonFileStorage:
    """Tests for the file backend."""

    @pytest.fixture
    def storage(self, tmp_path):
        return JsonFileStorage(tmp_path / "forms")

    @pytest.mark.unit
    def test_save_and_load(self, storage, sample_schema):
        storage.save(get_storage_key(), sample_schema)
        assert storage.path_for(get_storage_key()).name == "form-builder-schema.json"
        assert storage.exists(get_storage_key())
        assert storage.load(get_storage_key()) == sample_schema

    @pytest.mark.unit
    def test_save_replaces(self, storage, sample_schema):
        storage.save(get_storage_key(), sample_schema)
        storage.save(get_storage_key(), FormSchema(id="other"))
        assert storage.load(get_storage_key()).id == "other"
        leftovers = [p.name for p in storage.base_dir.iterdir()]
        assert leftovers == ["form-builder-schema.json"]

    @pytest.mark.unit
    def test_load_missing(self, storage):
        assert storage.load(get_storage_key()) is None
        assert not storage.exists(get_storage_key())

    @pytest.mark.unit
    def test_load_corrupt_file(self, storage):
        storage.base_dir.mkdir(parents=True)
        storage.path_for(get_storage_key()).write_text('{"id": 3}')
        with pytest.raises(SchemaLoadError):
            storage.load(get_storage_key())

    @pytest.mark.unit
    def test_delete(self, storage, sample_schema):
        storage.save(get_storage_key(), sample_schema)
        assert storage.delete(get_storage_key())
        assert not storage.delete(get_storage_key())

    @pytest.mark.unit
    @pytest.mark.parametrize("key", ["", "../escape", ".hidden", "a/b"])
    def test_rejects_unsafe_keys(self, storage, key):
        with pytest.raises(ValueError):
            storage.path_for(key)

    @pytest.mark.unit
    def test_default_dir_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FORMCANVAS_STORAGE_DIR", str(tmp_path))
        assert JsonFileStorage().base_dir == tmp_path


class TestMemoryStorage:
    """Tests for the in-memory backend."""

    @pytest.mark.unit
    def test_save_and_load(self, sample_schema):
        storage = MemoryStorage()
        storage.save(get_storage_key(), sample_schema)
        loaded = storage.load(get_storage_key())
        assert loaded == sample_schema
        assert loaded is not sample_schema

    @pytest.mark.unit
    def test_raw_payload_goes_through_parser(self):
        storage = MemoryStorage()
        storage.save_raw(get_storage_key(), "[]")
        with pytest.raises(SchemaLoadError):
            storage.load(get_storage_key())

    @pytest.mark.unit
    def test_delete_and_exists(self, sample_schema):
        storage = MemoryStorage()
        assert not storage.exists("k")
        storage.save("k", sample_schema)
        assert storage.exists("k")
        assert storage.delete("k")
        assert storage.load("k") is None
