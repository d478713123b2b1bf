"""Planting-bed grid representation.

A bed is modeled as a rectangular 2D grid of squares.  Each square is
either empty (``None``) or holds a ``PlantingRecord``:

    plant            name of the crop (a soft reference into the plant library)
    date             ISO planting date
    days_to_maturity copied from the library when the square was assigned
    note             free text

Grids are never changed in place.  Every edit returns a new ``BedGrid`` so
an application state holding the old grid keeps seeing the old contents.
"""

from dataclasses import dataclass, replace

from .calendar_utils import to_canonical
from .plant_info import DEFAULT_DAYS_TO_MATURITY


@dataclass(frozen=True)
class PlantingRecord:
    plant: str
    date: str
    days_to_maturity: int = DEFAULT_DAYS_TO_MATURITY
    note: str = ""

    def with_note(self, note: str) -> "PlantingRecord":
        return replace(self, note=note)

    def to_dict(self) -> dict:
        return {
            "plant": self.plant,
            "date": self.date,
            "daysToMaturity": self.days_to_maturity,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlantingRecord":
        """Rebuild a record from its stored form.

        Raises ``KeyError`` / ``ValueError`` if the plant name or the
        planting date is missing or unusable.
        """
        plant = str(data["plant"]).strip()
        planted = to_canonical(data.get("date"))
        if not plant or planted is None:
            raise ValueError(f"unusable planting record: {data!r}")
        days = data.get("daysToMaturity", data.get("days", DEFAULT_DAYS_TO_MATURITY))
        return cls(
            plant=plant,
            date=planted,
            days_to_maturity=int(days),
            note=str(data.get("note") or ""),
        )


class BedGrid:
    """Rectangular grid of optional planting records.

    Attributes:
        rows:  Number of rows.
        cols:  Number of columns.
        cells: Tuple of row tuples (row-major), each cell a
               ``PlantingRecord`` or ``None``.
    """

    def __init__(self, rows: int, cols: int):
        """Create a grid with every square empty."""
        if rows < 1 or cols < 1:
            raise ValueError(f"Bed must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.cells: tuple[tuple[PlantingRecord | None, ...], ...] = tuple(
            (None,) * cols for _ in range(rows)
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_matrix(cls, matrix):
        """Create a BedGrid from a 2D list of records / ``None``.

        Ragged rows are padded with empty squares (or truncated) to the
        width of the first row.
        """
        rows = len(matrix)
        cols = len(matrix[0]) if rows > 0 else 0
        grid = cls(rows, cols)
        grid.cells = tuple(
            tuple(row[:cols]) + (None,) * (cols - len(row)) for row in matrix
        )
        return grid

    def to_matrix(self) -> list[list[dict | None]]:
        """JSON-friendly nested lists (records become dicts)."""
        return [
            [cell.to_dict() if cell is not None else None for cell in row]
            for row in self.cells
        ]

    @classmethod
    def from_dicts(cls, matrix):
        """Inverse of ``to_matrix``.  Falsy squares become empty."""
        return cls.from_matrix(
            [[PlantingRecord.from_dict(v) if v else None for v in row] for row in matrix]
        )

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check(self, row: int, col: int):
        if not self.in_bounds(row, col):
            raise IndexError(
                f"Square ({row}, {col}) out of bounds for "
                f"{self.rows}x{self.cols} bed"
            )

    def get_cell(self, row: int, col: int) -> PlantingRecord | None:
        """Return the record in one square.

        Raises IndexError if (row, col) is out of bounds.
        """
        self._check(row, col)
        return self.cells[row][col]

    def with_cell(self, row: int, col: int, record: PlantingRecord | None) -> "BedGrid":
        """Return a copy of the grid with one square replaced.

        Raises IndexError if (row, col) is out of bounds.
        """
        self._check(row, col)
        matrix = [list(r) for r in self.cells]
        matrix[row][col] = record
        return BedGrid.from_matrix(matrix)

    def cleared(self, row: int, col: int) -> "BedGrid":
        return self.with_cell(row, col, None)

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    def resized(self, row_delta: int, col_delta: int) -> "BedGrid":
        """Grow or shrink the grid by the given deltas.

        Squares inside both the old and new bounds keep their contents;
        new squares start empty.  Returns ``self`` unchanged if either
        dimension would drop below 1.
        """
        rows, cols = self.rows + row_delta, self.cols + col_delta
        if rows < 1 or cols < 1:
            return self
        matrix = [
            [self.cells[r][c] if self.in_bounds(r, c) else None for c in range(cols)]
            for r in range(rows)
        ]
        return BedGrid.from_matrix(matrix)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def planted_squares(self):
        """Yield ``(row, col, record)`` for every occupied square, row-major."""
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                if cell is not None:
                    yield r, c, cell

    def is_empty(self) -> bool:
        return not any(True for _ in self.planted_squares())

    def __eq__(self, other):
        if not isinstance(other, BedGrid):
            return NotImplemented
        return self.cells == other.cells

    def __repr__(self):
        return f"BedGrid({self.rows}x{self.cols}, planted={sum(1 for _ in self.planted_squares())})"

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def display(self) -> str:
        """Return a human-readable string of the grid.

        Empty squares are shown as '.' and planted squares by plant name.
        """
        names = [cell.plant for _, _, cell in self.planted_squares()]
        w = max([len(n) for n in names] + [3])

        lines = []
        for row in self.cells:
            parts = []
            for cell in row:
                parts.append(".".rjust(w) if cell is None else cell.plant.rjust(w))
            lines.append(" ".join(parts))
        return "\n".join(lines)
