import pytest

from garden.grid import BedGrid, PlantingRecord


def _planted():
    grid = BedGrid(3, 4)
    grid = grid.with_cell(0, 0, PlantingRecord("Tomato", "2024-05-15", 75))
    grid = grid.with_cell(2, 3, PlantingRecord("Carrot", "2024-04-16", 70, "thin early"))
    grid = grid.with_cell(1, 2, PlantingRecord("Lettuce", "2024-04-16", 45))
    return grid


def test_new_grid_is_empty():
    grid = BedGrid(3, 8)
    assert (grid.rows, grid.cols) == (3, 8)
    assert all(len(row) == 8 for row in grid.cells)
    assert grid.is_empty()


def test_grid_needs_positive_dimensions():
    with pytest.raises(ValueError):
        BedGrid(0, 3)


def test_with_cell_does_not_touch_original():
    grid = BedGrid(2, 2)
    planted = grid.with_cell(1, 1, PlantingRecord("Tomato", "2024-05-15"))
    assert grid.get_cell(1, 1) is None
    assert planted.get_cell(1, 1).plant == "Tomato"


def test_out_of_bounds_raises():
    grid = BedGrid(2, 2)
    with pytest.raises(IndexError):
        grid.get_cell(2, 0)
    with pytest.raises(IndexError):
        grid.with_cell(0, -1, None)


def test_cleared():
    grid = _planted().cleared(0, 0)
    assert grid.get_cell(0, 0) is None
    assert grid.get_cell(2, 3).plant == "Carrot"


def test_resize_preserves_overlap_and_fills_empty():
    grid = _planted()
    bigger = grid.resized(1, 2)
    assert (bigger.rows, bigger.cols) == (4, 6)
    for r, c, rec in grid.planted_squares():
        assert bigger.get_cell(r, c) == rec
    assert all(cell is None for cell in bigger.cells[3])
    assert bigger.get_cell(0, 5) is None


def test_resize_below_one_is_noop():
    grid = BedGrid(1, 3)
    assert grid.resized(-1, 0) is grid
    assert grid.resized(0, -3) is grid


@pytest.mark.parametrize("dr,dc", [(2, 0), (0, 3), (1, 1), (5, 5)])
def test_resize_then_inverse_restores(dr, dc):
    grid = _planted()
    assert grid.resized(dr, dc).resized(-dr, -dc) == grid


def test_shrink_drops_cells_outside_new_bounds():
    grid = _planted().resized(-1, -1)
    assert (grid.rows, grid.cols) == (2, 3)
    assert [rec.plant for _, _, rec in grid.planted_squares()] == ["Tomato", "Lettuce"]


def test_from_matrix_pads_ragged_rows():
    rec = PlantingRecord("Tomato", "2024-05-15")
    grid = BedGrid.from_matrix([[rec, None, None], [None], [None, rec, None, rec]])
    assert (grid.rows, grid.cols) == (3, 3)
    assert grid.cells[1] == (None, None, None)
    assert grid.cells[2] == (None, rec, None)


def test_matrix_dicts_round_trip():
    grid = _planted()
    assert BedGrid.from_dicts(grid.to_matrix()) == grid


def test_record_from_dict_accepts_legacy_keys():
    rec = PlantingRecord.from_dict({"plant": "Tomato", "date": "2024-05-15", "days": 80})
    assert rec == PlantingRecord("Tomato", "2024-05-15", 80, "")


def test_record_from_dict_rejects_bad_date():
    with pytest.raises(ValueError):
        PlantingRecord.from_dict({"plant": "Tomato", "date": "soon"})


def test_display_marks_empty_squares():
    text = BedGrid(1, 2).with_cell(0, 1, PlantingRecord("Kale", "2024-05-01")).display()
    assert text.split() == [".", "Kale"]
