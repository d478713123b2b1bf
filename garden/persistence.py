"""Save and load garden state.

Store layout (one JSON file per key, like browser local storage)::

    <data dir>/plants.json     list of plant traits
    <data dir>/beds.json       {bed name: grid of records / null}
    <data dir>/settings.json   {"springFrost": ..., "fallFrost": ...}

Each entry is read independently; a missing or unreadable entry falls back
to the built-in defaults without affecting the others.  Writes are plain
snapshots: last write wins.

Archive format (.garden):
    ZIP holding plants.json, beds.json and settings.json in the same
    layout, for moving a garden between machines.
"""

import io
import json
import logging
import os
import zipfile

from .calendar_utils import to_canonical
from .grid import BedGrid
from .planner import GardenState, default_beds, default_state
from .plant_info import PlantTrait, default_frost_dates, default_plants

logger = logging.getLogger(__name__)

PLANTS_KEY = "plants"
BEDS_KEY = "beds"
SETTINGS_KEY = "settings"
STATE_KEYS = (PLANTS_KEY, BEDS_KEY, SETTINGS_KEY)

# Anything a malformed snapshot can raise while being rebuilt.
_DECODE_ERRORS = (ValueError, TypeError, KeyError, AttributeError, IndexError,
                  OverflowError)


# ---------------------------------------------------------------------------
# Key-value store
# ---------------------------------------------------------------------------

class JsonFileStore:
    """Tiny key-value store: one ``<key>.json`` file per key."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, os.path.basename(key) + ".json")

    def get(self, key: str) -> str | None:
        """Raw text stored under *key*, or ``None`` if there is none."""
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("could not read %s: %s", path, e)
            return None

    def set(self, key: str, text: str):
        os.makedirs(self.directory, exist_ok=True)
        with open(self._path(key), "w", encoding="utf-8") as f:
            f.write(text)

    def remove(self, key: str):
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


# ---------------------------------------------------------------------------
# Decoding (tolerant)
# ---------------------------------------------------------------------------

def decode_plants(raw) -> tuple[PlantTrait, ...]:
    """Plant traits from a stored list.  Raises on malformed data."""
    if not isinstance(raw, list) or not raw:
        raise ValueError("plant library must be a non-empty list")
    plants = []
    seen = set()
    for entry in raw:
        trait = PlantTrait.from_dict(entry)
        if trait.name in seen:
            continue  # keep the first of any duplicate names
        seen.add(trait.name)
        plants.append(trait)
    return tuple(plants)


def decode_beds(raw) -> dict[str, BedGrid]:
    """Bed grids from a stored mapping or list.  Raises on malformed data.

    Accepted shapes::

        {"Main Bed": [[...], ...]}
        [{"name": "Main Bed", "grid": [[...], ...]}, ...]
        [{"id": 3, "name": "Main Bed", "cells": [[...], ...]}, ...]
    """
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = []
        for entry in raw:
            name = entry.get("name") or entry.get("id")
            matrix = entry.get("grid", entry.get("cells", entry.get("squares")))
            items.append((name, matrix))
    else:
        raise ValueError("beds must be a mapping or a list")

    beds: dict[str, BedGrid] = {}
    for name, matrix in items:
        if name is None or str(name).strip() == "":
            raise ValueError("bed without a name")
        beds[str(name)] = BedGrid.from_dicts(matrix)
    if not beds:
        raise ValueError("at least one bed is required")
    return beds


def decode_settings(raw, year: int | None = None) -> tuple[str, str]:
    """(spring_frost, fall_frost); missing or bad dates use the defaults."""
    if not isinstance(raw, dict):
        raise ValueError("settings must be a mapping")
    spring, fall = default_frost_dates(year)
    return (
        to_canonical(raw.get("springFrost")) or spring,
        to_canonical(raw.get("fallFrost")) or fall,
    )


def _load_entry(text: str | None, decode, fallback, key: str):
    if text is None:
        return fallback()
    try:
        return decode(json.loads(text))
    except _DECODE_ERRORS as e:
        logger.warning("stored %r is unreadable (%s); using defaults", key, e)
        return fallback()


def state_from_texts(texts: dict, year: int | None = None) -> GardenState:
    """Rebuild a state from raw JSON texts keyed by ``STATE_KEYS``."""
    plants = _load_entry(texts.get(PLANTS_KEY), decode_plants, default_plants, PLANTS_KEY)
    beds = _load_entry(texts.get(BEDS_KEY), decode_beds, default_beds, BEDS_KEY)
    spring, fall = _load_entry(
        texts.get(SETTINGS_KEY),
        lambda raw: decode_settings(raw, year),
        lambda: default_frost_dates(year),
        SETTINGS_KEY,
    )
    return GardenState(plants=tuple(plants), beds=beds,
                       spring_frost=spring, fall_frost=fall)


def state_to_texts(state: GardenState) -> dict[str, str]:
    data = state.to_dict()
    return {key: json.dumps(data[key], indent=2) for key in STATE_KEYS}


# ---------------------------------------------------------------------------
# Store persistence
# ---------------------------------------------------------------------------

def load_state(store: JsonFileStore, year: int | None = None) -> GardenState:
    """Read the garden from *store*, falling back to defaults per entry."""
    return state_from_texts({key: store.get(key) for key in STATE_KEYS}, year)


def save_state(store: JsonFileStore, state: GardenState):
    """Snapshot every entry of *state* into *store*."""
    for key, text in state_to_texts(state).items():
        store.set(key, text)


def reset_state(store: JsonFileStore, year: int | None = None) -> GardenState:
    """Forget the stored garden and start over from the defaults."""
    for key in STATE_KEYS:
        store.remove(key)
    return default_state(year)


# ---------------------------------------------------------------------------
# .garden archive
# ---------------------------------------------------------------------------

def export_garden(state: GardenState) -> bytes:
    """Create a .garden ZIP archive in memory and return the raw bytes."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for key, text in state_to_texts(state).items():
            zf.writestr(f"{key}.json", text)
    return buf.getvalue()


def import_garden(data: bytes, year: int | None = None) -> GardenState:
    """Rebuild a state from a .garden archive.

    Raises ``zipfile.BadZipFile`` if *data* isn't a ZIP at all; missing or
    malformed members fall back to defaults like the file store does.
    """
    texts = {}
    with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
        names = set(zf.namelist())
        for key in STATE_KEYS:
            member = f"{key}.json"
            if member in names:
                texts[key] = zf.read(member).decode("utf-8", errors="replace")
    return state_from_texts(texts, year)
