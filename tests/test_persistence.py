import io
import json
import zipfile

import pytest

from garden.persistence import (
    JsonFileStore,
    export_garden,
    import_garden,
    load_state,
    reset_state,
    save_state,
)
from garden.planner import add_bed, assign_plant, default_state, set_note, update_plant


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(str(tmp_path / "data"))


@pytest.fixture
def garden():
    s = default_state(2024)
    s = add_bed(s, "Herbs", 2, 3)
    s = assign_plant(s, "Main Bed", 0, 0, "Tomato", "2024-05-15")
    s = assign_plant(s, "Herbs", 1, 2, "Basil", "2024-05-20")
    s = set_note(s, "Herbs", 1, 2, "pinch flowers")
    return update_plant(s, "Lettuce", replant_delay=10)


def test_empty_store_gives_defaults(store):
    assert load_state(store, 2024) == default_state(2024)


def test_save_and_load(store, garden):
    save_state(store, garden)
    assert load_state(store, 2024) == garden


def test_entries_are_independent_json_files(store, garden):
    save_state(store, garden)
    plants = json.loads(store.get("plants"))
    beds = json.loads(store.get("beds"))
    assert plants[1]["name"] == "Tomato"
    assert plants[1]["indoorOffset"] == -56
    assert beds["Herbs"][1][2] == {"plant": "Basil", "date": "2024-05-20",
                                   "daysToMaturity": 60, "note": "pinch flowers"}
    assert beds["Herbs"][0] == [None, None, None]


def test_corrupt_entry_falls_back_alone(store, garden):
    save_state(store, garden)
    store.set("beds", "{not json")
    loaded = load_state(store, 2024)
    assert list(loaded.beds) == ["Main Bed"]
    assert loaded.beds["Main Bed"].is_empty()
    assert loaded.plants == garden.plants


@pytest.mark.parametrize("key,text", [
    ("plants", "[]"),
    ("plants", '[{"days": 40}]'),
    ("plants", '{"name": "Tomato"}'),
    ("beds", "{}"),
    ("beds", '{"Main Bed": []}'),
    ("beds", '{"Main Bed": [[{"plant": "Tomato", "date": "later"}]]}'),
    ("beds", "42"),
    ("plants", '[{"name": "Tomato", "daysToMaturity": 1e400}]'),
    ("beds", '{"Main Bed": [[{"plant": "Tomato", "date": "2024-05-15", "daysToMaturity": Infinity}]]}'),
    ("settings", '"April"'),
])
def test_malformed_entries_use_defaults(store, key, text):
    store.set(key, text)
    assert load_state(store, 2024) == default_state(2024)


def test_undecodable_file_uses_defaults(store, tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "beds.json").write_bytes(b"\xff\xfe{not utf8")
    assert store.get("beds") is None
    assert load_state(store, 2024) == default_state(2024)


def test_bed_list_layout_is_accepted(store):
    store.set("beds", json.dumps([
        {"id": 1, "name": "North", "grid": [[None, {"plant": "Kale", "date": "2024-04-01"}]]},
        {"id": 2, "cells": [[None], [None]]},
    ]))
    state = load_state(store, 2024)
    assert list(state.beds) == ["North", "2"]
    assert state.beds["North"].get_cell(0, 1).plant == "Kale"
    assert (state.beds["2"].rows, state.beds["2"].cols) == (2, 1)


def test_legacy_plant_fields(store):
    store.set("plants", json.dumps([
        {"name": "Broccoli", "days": 70, "springOffset": -7, "indoorOffset": -42,
         "startMethod": "indoor"},
        {"name": "Carrot", "days": 70, "springOffset": -14, "indoorOffset": None},
        {"name": "Carrot", "days": 99},
    ]))
    plants = load_state(store, 2024).plants
    assert [p.name for p in plants] == ["Broccoli", "Carrot"]
    assert plants[0].starts_indoors
    assert not plants[1].starts_indoors
    assert plants[1].days_to_maturity == 70


def test_settings_with_bad_date_keep_default(store):
    store.set("settings", json.dumps({"springFrost": "2024-05-05", "fallFrost": "nope"}))
    state = load_state(store, 2024)
    assert (state.spring_frost, state.fall_frost) == ("2024-05-05", "2024-10-15")


def test_reset_removes_entries(store, garden):
    save_state(store, garden)
    assert reset_state(store, 2024) == default_state(2024)
    assert store.get("plants") is None
    assert store.get("beds") is None


def test_export_import_round_trip(garden):
    data = export_garden(garden)
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert sorted(zf.namelist()) == ["beds.json", "plants.json", "settings.json"]
    assert import_garden(data, 2024) == garden


def test_import_rejects_non_zip():
    with pytest.raises(zipfile.BadZipFile):
        import_garden(b"definitely not a zip")
