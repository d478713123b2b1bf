"""Garden bed planning package.

Exports the state model, actions and persistence functions so consumers
can do::

    from garden import default_state, dispatch, build_calendar
"""

from .calendar_utils import (
    parse_date,
    to_canonical,
    add_offset,
    days_between,
    format_display,
)
from .plant_info import PlantTrait, DEFAULT_PLANTS, find_plant, default_trait
from .grid import BedGrid, PlantingRecord
from .timeline import succession_dates, build_calendar, calendar_entries
from .planner import (
    ActionRejected,
    ActionResult,
    GardenState,
    ACTION_TYPES,
    default_state,
    dispatch,
    add_bed,
    rename_bed,
    delete_bed,
    resize_bed,
    assign_plant,
    clear_square,
    set_note,
    add_plant,
    update_plant,
    set_frost_dates,
    outdoor_date,
    planting_summary,
)
from .persistence import (
    JsonFileStore,
    load_state,
    save_state,
    reset_state,
    export_garden,
    import_garden,
)
