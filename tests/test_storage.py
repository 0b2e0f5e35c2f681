"""Tests for the data directory store."""

import json

from clarity_cli.schemas import ArchData, ClassificationsData, EntryPointClassification
from clarity_cli.storage import DataStore, make_classifications, utc_timestamp
from helpers import SAMPLE_CLASSIFICATIONS


class TestDataStore:
    def test_load_all_from_sample(self, data_dir):
        loaded = DataStore(data_dir).load_all()
        assert set(loaded) == {"structure", "calls", "arch"}
        assert isinstance(loaded["arch"], ArchData)

    def test_missing_directory_loads_nothing(self, temp_dir):
        store = DataStore(temp_dir / "nowhere")
        assert store.load_all() == {}
        assert store.available() == []

    def test_broken_file_is_skipped(self, data_dir):
        (data_dir / "calls.json").write_text("{oops", encoding="utf-8")
        loaded = DataStore(data_dir).load_all()
        assert "calls" not in loaded
        assert "structure" in loaded

    def test_undecodable_file_is_skipped(self, data_dir):
        (data_dir / "calls.json").write_bytes(b"\xff\xfe{}")
        loaded = DataStore(data_dir).load_all()
        assert "calls" not in loaded
        assert {"structure", "arch"} <= set(loaded)

    def test_available(self, data_dir):
        assert DataStore(data_dir).available() == ["structure", "calls", "arch"]

    def test_save_and_reload_classifications(self, temp_dir):
        store = DataStore(temp_dir / "out")
        data = ClassificationsData.model_validate({**SAMPLE_CLASSIFICATIONS, "analyzedAt": "2026-01-01T00:00:00Z"})
        path = store.save_classifications(data)

        assert path == temp_dir / "out" / "classifications.json"
        written = json.loads(path.read_text())
        assert written["analyzedAt"] == "2026-01-01T00:00:00Z"

        reloaded = store.load_dataset("classifications")
        assert reloaded.get("src/index.ts::main").type == "cli-command"


def test_make_classifications_stamps_time():
    items = [EntryPointClassification.model_validate(c) for c in SAMPLE_CLASSIFICATIONS["classifications"]]
    data = make_classifications(items)
    assert len(data.classifications) == 2
    assert data.analyzedAt.endswith("Z")


def test_utc_timestamp_format():
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert "T" in stamp
