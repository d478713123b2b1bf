"""Garden planner state and actions.

The whole application state lives in one immutable ``GardenState``:

    plants        the plant-trait library (ordered)
    beds          bed name -> ``BedGrid`` (insertion ordered)
    spring_frost  ISO date anchoring ``spring_offset``
    fall_frost    ISO date cutting off succession sowings

Every user action is a plain function ``action(state, ...) -> GardenState``
that never touches its input.  Actions whose preconditions fail raise
``ActionRejected``; ``dispatch`` turns those into an ``ActionResult`` with
the unchanged state and a message for the user, so nothing propagates to
the UI layer.
"""

import logging
from dataclasses import dataclass, replace

from .calendar_utils import add_offset, to_canonical
from .grid import BedGrid, PlantingRecord
from .plant_info import (
    START_METHODS,
    PlantTrait,
    default_frost_dates,
    default_plants,
    default_trait,
    find_plant,
    trait_fields,
)
from .timeline import build_calendar, indoor_start_date

logger = logging.getLogger(__name__)

DEFAULT_BED_NAME = "Main Bed"
DEFAULT_BED_SIZE = (3, 8)
NEW_BED_SIZE = (3, 6)
NEW_PLANT_NAME = "New Plant"


class ActionRejected(ValueError):
    """An action's preconditions failed; the state is left unchanged."""


@dataclass(frozen=True)
class GardenState:
    plants: tuple[PlantTrait, ...]
    beds: dict[str, BedGrid]
    spring_frost: str
    fall_frost: str

    def bed(self, name: str) -> BedGrid:
        try:
            return self.beds[name]
        except (KeyError, TypeError):
            raise ActionRejected(f"No bed named {name!r}") from None

    def plant(self, name: str) -> PlantTrait | None:
        return find_plant(self.plants, name)

    def calendar(self, include_succession: bool = True) -> dict[str, list[str]]:
        """Date -> event descriptions for every planted square."""
        cutoff = self.fall_frost if include_succession else None
        return build_calendar(self.beds, self.plants, cutoff)

    def to_dict(self) -> dict:
        return {
            "plants": [p.to_dict() for p in self.plants],
            "beds": {name: grid.to_matrix() for name, grid in self.beds.items()},
            "settings": {
                "springFrost": self.spring_frost,
                "fallFrost": self.fall_frost,
            },
        }


@dataclass(frozen=True)
class ActionResult:
    state: GardenState
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def default_beds() -> dict[str, BedGrid]:
    return {DEFAULT_BED_NAME: BedGrid(*DEFAULT_BED_SIZE)}


def default_state(year: int | None = None) -> GardenState:
    """Fresh state: starter plant library, one empty bed, default frosts."""
    spring, fall = default_frost_dates(year)
    return GardenState(
        plants=tuple(default_plants()),
        beds=default_beds(),
        spring_frost=spring,
        fall_frost=fall,
    )


# -----------------------------------------------------------------------
# Scheduling helpers
# -----------------------------------------------------------------------

def outdoor_date(state: GardenState, plant_name: str) -> str | None:
    """Default outdoor planting date: spring frost shifted by the crop's
    spring offset (the frost date itself for unknown crops)."""
    trait = state.plant(plant_name)
    if trait is None:
        return to_canonical(state.spring_frost)
    return add_offset(state.spring_frost, trait.spring_offset)


def _unique_name(base: str, taken) -> str:
    if base not in taken:
        return base
    n = 2
    while f"{base} {n}" in taken:
        n += 1
    return f"{base} {n}"


def _clean_name(name) -> str:
    name = (name or "").strip() if isinstance(name, str) else ""
    if not name:
        raise ActionRejected("Name must not be empty")
    return name


def _with_bed(state: GardenState, name: str, grid: BedGrid) -> GardenState:
    beds = dict(state.beds)
    beds[name] = grid
    return replace(state, beds=beds)


def _square(state: GardenState, bed: str, row: int, col: int) -> BedGrid:
    grid = state.bed(bed)
    if not grid.in_bounds(row, col):
        raise ActionRejected(f"No square ({row}, {col}) in {bed!r}")
    return grid


# -----------------------------------------------------------------------
# Bed actions
# -----------------------------------------------------------------------

def add_bed(state: GardenState, name: str | None = None,
            rows: int = NEW_BED_SIZE[0], cols: int = NEW_BED_SIZE[1]) -> GardenState:
    if name is None:
        name = _unique_name("New Bed", state.beds)
    name = _clean_name(name)
    if name in state.beds:
        raise ActionRejected(f"A bed named {name!r} already exists")
    if rows < 1 or cols < 1:
        raise ActionRejected("Beds need at least one row and one column")
    return _with_bed(state, name, BedGrid(rows, cols))


def rename_bed(state: GardenState, old: str, new: str) -> GardenState:
    state.bed(old)
    new = _clean_name(new)
    if new == old:
        return state
    if new in state.beds:
        raise ActionRejected(f"A bed named {new!r} already exists")
    beds = {(new if k == old else k): v for k, v in state.beds.items()}
    return replace(state, beds=beds)


def delete_bed(state: GardenState, name: str) -> GardenState:
    """Remove a bed.  The last remaining bed can't be deleted."""
    state.bed(name)
    if len(state.beds) <= 1:
        raise ActionRejected("At least one bed must remain")
    beds = {k: v for k, v in state.beds.items() if k != name}
    return replace(state, beds=beds)


def resize_bed(state: GardenState, name: str, row_delta: int, col_delta: int) -> GardenState:
    grid = state.bed(name)
    resized = grid.resized(row_delta, col_delta)
    if resized is grid:
        raise ActionRejected("Beds need at least one row and one column")
    return _with_bed(state, name, resized)


# -----------------------------------------------------------------------
# Square actions
# -----------------------------------------------------------------------

def assign_plant(state: GardenState, bed: str, row: int, col: int,
                 plant_name: str, date=None) -> GardenState:
    """Plant *plant_name* in one square.

    When *date* is empty the crop's default outdoor date is used.  A
    plant the library doesn't know gets a default trait first.
    """
    grid = _square(state, bed, row, col)
    plant_name = _clean_name(plant_name)

    final = to_canonical(date) if date else outdoor_date(state, plant_name)
    if final is None:
        raise ActionRejected(f"Can't work out a planting date for {plant_name}")

    trait = state.plant(plant_name)
    if trait is None:
        trait = default_trait(plant_name)
        logger.info("adding %r to the plant library with default traits", plant_name)
        state = replace(state, plants=state.plants + (trait,))

    record = PlantingRecord(plant_name, final, trait.days_to_maturity)
    return _with_bed(state, bed, grid.with_cell(row, col, record))


def clear_square(state: GardenState, bed: str, row: int, col: int) -> GardenState:
    grid = _square(state, bed, row, col)
    return _with_bed(state, bed, grid.cleared(row, col))


def set_note(state: GardenState, bed: str, row: int, col: int, note: str) -> GardenState:
    grid = _square(state, bed, row, col)
    record = grid.get_cell(row, col)
    if record is None:
        raise ActionRejected("Only planted squares can have notes")
    return _with_bed(state, bed, grid.with_cell(row, col, record.with_note(str(note or ""))))


# -----------------------------------------------------------------------
# Plant library actions
# -----------------------------------------------------------------------

def add_plant(state: GardenState, name: str | None = None) -> GardenState:
    """Append a trait with default values, suffixing the name if taken."""
    taken = {p.name for p in state.plants}
    name = _unique_name(_clean_name(name or NEW_PLANT_NAME), taken)
    return replace(state, plants=state.plants + (default_trait(name),))


def _whole(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_trait(trait: PlantTrait):
    if isinstance(trait.days_to_maturity, bool) or not isinstance(trait.days_to_maturity, int):
        raise ActionRejected("Days to maturity must be a whole number")
    if trait.days_to_maturity <= 0:
        raise ActionRejected("Days to maturity must be positive")
    if not _whole(trait.replant_delay) or trait.replant_delay < 0:
        raise ActionRejected("Replant delay can't be negative")
    if not _whole(trait.spring_offset):
        raise ActionRejected("Spring offset must be a whole number")
    if trait.indoor_offset is not None and not _whole(trait.indoor_offset):
        raise ActionRejected("Indoor offset must be a whole number or empty")
    if not isinstance(trait.succession, bool):
        raise ActionRejected("Succession must be true or false")
    if not isinstance(trait.notes, str):
        raise ActionRejected("Notes must be text")
    if trait.start_method is not None and trait.start_method not in START_METHODS:
        raise ActionRejected(f"Start method must be one of {', '.join(START_METHODS)}")


def update_plant(state: GardenState, plant_name: str, **changes) -> GardenState:
    """Edit one trait.

    *changes* use the ``PlantTrait`` field names.  Renaming doesn't touch
    squares that already reference the old name.
    """
    trait = state.plant(plant_name)
    if trait is None:
        raise ActionRejected(f"No plant named {plant_name!r}")
    unknown = set(changes) - set(trait_fields(trait))
    if unknown:
        raise ActionRejected(f"Unknown plant fields: {', '.join(sorted(unknown))}")

    if "name" in changes:
        changes["name"] = _clean_name(changes["name"])
        if changes["name"] != plant_name and state.plant(changes["name"]) is not None:
            raise ActionRejected(f"A plant named {changes['name']!r} already exists")

    updated = replace(trait, **changes)
    _validate_trait(updated)
    plants = tuple(updated if p is trait else p for p in state.plants)
    return replace(state, plants=plants)


# -----------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------

def set_frost_dates(state: GardenState, spring=None, fall=None) -> GardenState:
    changes = {}
    for key, value in (("spring_frost", spring), ("fall_frost", fall)):
        if value is None:
            continue
        canonical = to_canonical(value)
        if canonical is None:
            raise ActionRejected(f"Not a valid date: {value!r}")
        changes[key] = canonical
    return replace(state, **changes) if changes else state


# -----------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------

def _int(action: dict, key: str, default=None) -> int:
    value = action.get(key, default)
    if isinstance(value, bool):
        raise ActionRejected(f"{key!r} must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ActionRejected(f"{key!r} must be a whole number") from None


def _flag(value, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ActionRejected(f"{key!r} must be true or false")


_PLANT_FIELDS = {
    "name": "name",
    "daysToMaturity": "days_to_maturity",
    "springOffset": "spring_offset",
    "indoorOffset": "indoor_offset",
    "succession": "succession",
    "replantDelay": "replant_delay",
    "notes": "notes",
    "startMethod": "start_method",
}


def _plant_changes(fields) -> dict:
    if fields is None:
        fields = {}
    if not isinstance(fields, dict):
        raise ActionRejected("'fields' must be an object")
    changes = {}
    for key, value in fields.items():
        attr = _PLANT_FIELDS.get(key, key)
        if attr in ("days_to_maturity", "spring_offset", "replant_delay"):
            value = _int(fields, key)
        elif attr == "indoor_offset":
            value = None if value in (None, "") else _int(fields, key)
        elif attr == "succession":
            value = _flag(value, key)
        changes[attr] = value
    return changes


_ACTIONS = {
    "add_bed": lambda s, a: add_bed(
        s, a.get("name"), _int(a, "rows", NEW_BED_SIZE[0]), _int(a, "cols", NEW_BED_SIZE[1])),
    "rename_bed": lambda s, a: rename_bed(s, a.get("bed"), a.get("name")),
    "delete_bed": lambda s, a: delete_bed(s, a.get("bed")),
    "resize_bed": lambda s, a: resize_bed(
        s, a.get("bed"), _int(a, "rows", 0), _int(a, "cols", 0)),
    "assign": lambda s, a: assign_plant(
        s, a.get("bed"), _int(a, "row"), _int(a, "col"), a.get("plant"), a.get("date")),
    "clear": lambda s, a: clear_square(s, a.get("bed"), _int(a, "row"), _int(a, "col")),
    "set_note": lambda s, a: set_note(
        s, a.get("bed"), _int(a, "row"), _int(a, "col"), a.get("note", "")),
    "add_plant": lambda s, a: add_plant(s, a.get("name")),
    "update_plant": lambda s, a: update_plant(
        s, a.get("plant"), **_plant_changes(a.get("fields", {}))),
    "set_frost": lambda s, a: set_frost_dates(s, a.get("spring"), a.get("fall")),
}

ACTION_TYPES = tuple(_ACTIONS)


def dispatch(state: GardenState, action: dict) -> ActionResult:
    """Apply one UI action.

    Args:
        state:  Current state (never modified).
        action: ``{"type": <one of ACTION_TYPES>, ...arguments}``.

    Returns:
        ``ActionResult`` holding the new state, or the unchanged state and
        an error message if the action was rejected.
    """
    kind = action.get("type") if isinstance(action, dict) else None
    handler = _ACTIONS.get(kind) if isinstance(kind, str) else None
    if handler is None:
        logger.info("rejected unknown action %r", kind)
        return ActionResult(state, f"Unknown action: {kind!r}")
    try:
        return ActionResult(handler(state, action))
    except ActionRejected as e:
        logger.info("rejected %s: %s", kind, e)
        return ActionResult(state, str(e))


def planting_summary(state: GardenState) -> list[dict]:
    """One row per planted square with its derived dates, for reports."""
    rows = []
    for bed_name, grid in state.beds.items():
        for r, c, record in grid.planted_squares():
            trait = state.plant(record.plant)
            planted = to_canonical(record.date)
            harvest = add_offset(record.date, record.days_to_maturity)
            rows.append({
                "bed": bed_name,
                "row": r,
                "col": c,
                "plant": record.plant,
                "date": planted,
                "harvest": harvest,
                "indoor_start": indoor_start_date(record, trait),
                "known_plant": trait is not None,
                "note": record.note,
            })
    # squares with an unreadable date go last
    rows.sort(key=lambda e: (e["date"] is None, e["date"] or "", e["bed"], e["row"], e["col"]))
    return rows
