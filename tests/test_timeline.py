import pytest

from garden.calendar_utils import parse_date
from garden.grid import BedGrid, PlantingRecord
from garden.plant_info import PlantTrait
from garden.timeline import build_calendar, calendar_entries, succession_dates

LETTUCE = PlantTrait("Lettuce", 45, indoor_offset=-28, succession=True, replant_delay=7)
TOMATO = PlantTrait("Tomato", 75, spring_offset=14, indoor_offset=-56)
CARROT = PlantTrait("Carrot", 70, succession=True, replant_delay=14)


# ---- succession ----

def test_succession_dates_step_by_cycle():
    assert succession_dates(LETTUCE, "2024-04-01", "2024-10-15") == [
        "2024-05-23",
        "2024-07-14",
        "2024-09-04",
    ]


def test_succession_never_reaches_cutoff():
    cutoff = "2024-09-04"
    dates = succession_dates(LETTUCE, "2024-04-01", cutoff)
    assert dates == ["2024-05-23", "2024-07-14"]
    assert all(parse_date(d) < parse_date(cutoff) for d in dates)


def test_succession_requires_flag():
    assert succession_dates(TOMATO, "2024-04-01", "2024-10-15") == []


@pytest.mark.parametrize("days,delay", [(0, 0), (-10, 5), (-3, 3)])
def test_non_positive_cycle_emits_nothing(days, delay):
    trait = PlantTrait("Odd", days, succession=True, replant_delay=delay)
    assert succession_dates(trait, "2024-04-01", "2024-10-15") == []


def test_succession_with_bad_dates():
    assert succession_dates(LETTUCE, "bad", "2024-10-15") == []
    assert succession_dates(LETTUCE, "2024-04-01", None) == []


def test_succession_stops_at_calendar_edge():
    assert succession_dates(LETTUCE, "9999-12-01", "9999-12-31") == []


def test_succession_start_after_cutoff():
    assert succession_dates(CARROT, "2024-11-01", "2024-10-15") == []


# ---- calendar ----

def test_tomato_outdoor_and_indoor_events():
    bed = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Tomato", "2024-05-15"))
    cal = build_calendar({"Main Bed": bed}, [TOMATO])
    assert cal["2024-05-15"] == ["Tomato (outdoors)"]
    assert cal["2024-03-20"] == ["Tomato (indoors)"]


def test_outdoor_start_method_skips_indoor_event():
    trait = PlantTrait("Tomato", 75, indoor_offset=-56, start_method="outdoor")
    bed = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Tomato", "2024-05-15"))
    assert build_calendar({"b": bed}, [trait]) == {"2024-05-15": ["Tomato (outdoors)"]}


def test_unknown_plant_still_gets_outdoor_event():
    bed = BedGrid(1, 2).with_cell(0, 1, PlantingRecord("Okra", "2024-06-01"))
    assert build_calendar({"b": bed}, [TOMATO]) == {"2024-06-01": ["Okra (outdoors)"]}


def test_invalid_record_date_is_omitted():
    bed = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Tomato", "whenever"))
    assert build_calendar({"b": bed}, [TOMATO]) == {}


def test_record_datetime_is_keyed_by_day():
    bed = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Tomato", "2024-05-15T08:00"))
    cal = build_calendar({"b": bed}, [TOMATO])
    assert cal == {
        "2024-03-20": ["Tomato (indoors)"],
        "2024-05-15": ["Tomato (outdoors)"],
    }


def test_dates_sorted_and_discovery_order_kept():
    a = (BedGrid(2, 2)
         .with_cell(0, 1, PlantingRecord("Tomato", "2024-05-15"))
         .with_cell(1, 0, PlantingRecord("Okra", "2024-05-15")))
    b = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Bean", "2024-05-01"))
    cal = build_calendar({"A": a, "B": b}, [TOMATO])
    assert list(cal) == ["2024-03-20", "2024-05-01", "2024-05-15"]
    assert cal["2024-05-15"] == ["Tomato (outdoors)", "Okra (outdoors)"]


def test_fall_frost_adds_succession_events():
    bed = BedGrid(1, 1).with_cell(0, 0, PlantingRecord("Carrot", "2024-04-16"))
    without = build_calendar({"b": bed}, [CARROT])
    with_succession = build_calendar({"b": bed}, [CARROT], "2024-10-15")
    assert without == {"2024-04-16": ["Carrot (outdoors)"]}
    # 70 days to harvest + 14 days before resowing
    assert with_succession == {
        "2024-04-16": ["Carrot (outdoors)"],
        "2024-07-09": ["Carrot (succession)"],
        "2024-10-01": ["Carrot (succession)"],
    }


def test_calendar_entries_labels():
    rows = calendar_entries({"2024-03-20": ["Tomato (indoors)"]})
    assert rows[0]["date"] == "2024-03-20"
    assert rows[0]["events"] == ["Tomato (indoors)"]
    assert rows[0]["label"].endswith(" 20")
