"""Garden planner demonstration and entry point.

Starts from the default garden, plants a few squares, prints the beds and
the derived planting calendar, then saves the result to ``data/``.
"""

import os
import sys

# Ensure project root is on the path so ``garden`` can be imported
# regardless of the working directory.
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _PROJECT_ROOT)

from garden import (
    JsonFileStore,
    default_state,
    dispatch,
    format_display,
    load_state,
    planting_summary,
    save_state,
)


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

DEMO_ACTIONS = [
    {"type": "add_bed", "name": "Herb Bed", "rows": 2, "cols": 4},
    {"type": "assign", "bed": "Main Bed", "row": 0, "col": 0, "plant": "Tomato"},
    {"type": "assign", "bed": "Main Bed", "row": 0, "col": 1, "plant": "Tomato",
     "date": None},
    {"type": "assign", "bed": "Main Bed", "row": 1, "col": 0, "plant": "Lettuce"},
    {"type": "assign", "bed": "Main Bed", "row": 2, "col": 0, "plant": "Carrot"},
    {"type": "assign", "bed": "Herb Bed", "row": 0, "col": 0, "plant": "Basil"},
    {"type": "set_note", "bed": "Main Bed", "row": 0, "col": 0,
     "note": "Cage before transplanting"},
    {"type": "resize_bed", "bed": "Herb Bed", "rows": -2, "cols": 0},
]


def display_beds(state):
    """Pretty-print every bed to stdout."""
    for name, grid in state.beds.items():
        print(f"\n  {name}  ({grid.rows}x{grid.cols})")
        for line in grid.display().split("\n"):
            print(f"    {line}")


def display_calendar(state):
    """Print the calendar view, one line per event."""
    print(f"\n{'=' * 55}")
    print("  Planting Calendar")
    print(f"  Spring frost: {format_display(state.spring_frost)}   "
          f"Fall frost: {format_display(state.fall_frost)}")
    print(f"{'=' * 55}")

    for day, events in state.calendar().items():
        print(f"\n  {format_display(day):7s} ({day})")
        for e in events:
            print(f"    - {e}")


def display_summary(state):
    print("\n--- Square Summary ---")
    for row in planting_summary(state):
        indoor = row["indoor_start"] or "direct sow"
        print(
            f"  {row['bed']:10s} [{row['row']},{row['col']}]  "
            f"{row['plant']:10s} plant {row['date']}  "
            f"harvest {row['harvest']}  start {indoor}"
        )
        if row["note"]:
            print(f"      note: {row['note']}")


# -------------------------------------------------------------------
# Main
# -------------------------------------------------------------------

def main():
    data_dir = os.path.join(_PROJECT_ROOT, "data")
    store = JsonFileStore(data_dir)

    # ---- 1. Start from the defaults ----
    state = default_state()
    print(f"Plant library: {', '.join(p.name for p in state.plants)}")

    # ---- 2. Apply the demo actions ----
    for action in DEMO_ACTIONS:
        result = dispatch(state, action)
        if not result.ok:
            print(f"  [{action['type']}] rejected: {result.error}")
        state = result.state

    assert "Basil" in {p.name for p in state.plants}, "Basil was not auto-created!"
    assert "Main Bed" in state.beds

    # ---- 3. Display ----
    display_beds(state)
    display_calendar(state)
    display_summary(state)

    # ---- 4. Persist and verify the round trip ----
    save_state(store, state)
    print(f"\nGarden saved to {data_dir}")

    reloaded = load_state(store)
    assert reloaded == state, "Round-trip mismatch!"
    print("OK: garden reloads identically.")


if __name__ == "__main__":
    main()
