"""Derived planting timeline.

Two pure projections over the bed/plant state:

* ``succession_dates``: follow-on sowing dates for a succession crop,
  stopping before the fall frost cutoff.
* ``build_calendar``: every planting-related event across all beds,
  indexed by ISO date, which powers the calendar view.

Nothing here is stored; both are recomputed from the current state on
every render.
"""

import logging

from .calendar_utils import add_offset, format_display, parse_date, to_canonical
from .plant_info import PlantTrait, find_plant

logger = logging.getLogger(__name__)

OUTDOORS = "outdoors"
INDOORS = "indoors"
SUCCESSION = "succession"


def succession_dates(trait: PlantTrait, start, fall_cutoff) -> list[str]:
    """Repeat-sowing dates for *trait* after an initial planting on *start*.

    Each cycle is ``harvest = start + days_to_maturity`` followed by
    ``next = harvest + replant_delay``.  Generation stops at the first
    *next* on or after *fall_cutoff*, or as soon as a date can't be
    computed.

    Returns an empty list for non-succession crops, for a non-positive
    cycle length, or when *start* / *fall_cutoff* aren't valid dates.
    """
    if not trait.succession or trait.cycle_days <= 0:
        return []
    cutoff = parse_date(fall_cutoff)
    if cutoff is None or parse_date(start) is None:
        return []

    dates = []
    current = start
    while True:
        harvest = add_offset(current, trait.days_to_maturity)
        if harvest is None:
            break
        nxt = add_offset(harvest, trait.replant_delay)
        if nxt is None or parse_date(nxt) >= cutoff:
            break
        dates.append(nxt)
        current = nxt
    return dates


def indoor_start_date(record, trait: PlantTrait | None) -> str | None:
    """Seed-starting date for a square, or ``None`` if it's direct-sown."""
    if trait is None or trait.indoor_offset is None or not trait.starts_indoors:
        return None
    return add_offset(record.date, trait.indoor_offset)


def build_calendar(beds, plants, fall_frost=None) -> dict[str, list[str]]:
    """Index every planting event across all beds by date.

    Args:
        beds:       Mapping of bed name -> ``BedGrid``.
        plants:     Iterable of ``PlantTrait``.
        fall_frost: Optional cutoff; when given, succession crops also
                    contribute their repeat sowings.

    Returns:
        ``{iso_date: [description, ...]}`` with dates ascending and
        descriptions in discovery order (beds in order, squares row-major).
        Descriptions look like ``"Tomato (outdoors)"``.
    """
    plants = tuple(plants)
    events: dict[str, list[str]] = {}

    def emit(when: str, plant: str, kind: str):
        events.setdefault(when, []).append(f"{plant} ({kind})")

    for bed_name, grid in beds.items():
        for r, c, record in grid.planted_squares():
            planted = to_canonical(record.date)
            if planted is None:
                logger.debug("skipping %s[%d][%d]: bad date %r",
                             bed_name, r, c, record.date)
                continue
            emit(planted, record.plant, OUTDOORS)

            trait = find_plant(plants, record.plant)
            if trait is None:
                continue

            indoor = indoor_start_date(record, trait)
            if indoor is not None:
                emit(indoor, record.plant, INDOORS)

            if fall_frost is not None:
                for when in succession_dates(trait, planted, fall_frost):
                    emit(when, record.plant, SUCCESSION)

    return {d: events[d] for d in sorted(events)}


def calendar_entries(calendar: dict[str, list[str]]) -> list[dict]:
    """Flatten a calendar mapping into display rows for the UI."""
    return [
        {"date": d, "label": format_display(d), "events": list(evts)}
        for d, evts in calendar.items()
    ]
