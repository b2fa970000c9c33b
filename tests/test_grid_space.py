import math

import numpy as np
import pytest

from potentials.analysis.grid_space import GridSpace, GridProperty, InvalidConfigurationError
from potentials.model.geometry_primitives import Point, Rect, Size


class TestConfiguration:
    def test_spacing(self, grid):
        assert grid.row_count == 11
        assert grid.col_count == 11
        assert grid.delta_x == 1.0
        assert grid.delta_y == 1.0
        assert grid.is_configured
        assert grid.fields_match()

    def test_anisotropic_spacing(self):
        grid = GridSpace(Rect(-1.0, 2.0, 4.0, 1.0), rows=3, cols=5)
        assert grid.delta_x == 1.0
        assert grid.delta_y == 0.5
        assert grid.point_for_node(2, 4) == Point(3.0, 3.0)

    @pytest.mark.parametrize(
        "rect, rows, cols",
        [
            (Rect(0.0, 0.0, 0.0, 1.0), 5, 5),
            (Rect(0.0, 0.0, 1.0, -1.0), 5, 5),
            (Rect(0.0, 0.0, math.nan, 1.0), 5, 5),
            (Rect(0.0, 0.0, 1.0, 1.0), 1, 5),
            (Rect(0.0, 0.0, 1.0, 1.0), 5, 0),
        ],
    )
    def test_invalid_configuration_fails_construction(self, rect, rows, cols):
        with pytest.raises(InvalidConfigurationError):
            GridSpace(rect, rows=rows, cols=cols)

    def test_failed_reconfiguration_keeps_previous_grid(self, grid):
        with pytest.raises(InvalidConfigurationError):
            grid.configure(Rect(0.0, 0.0, 1.0, 1.0), rows=0, cols=0)
        assert grid.row_count == 11
        assert grid.rect == Rect(0.0, 0.0, 10.0, 10.0)

    def test_unconfigured_grid(self):
        grid = GridSpace()
        assert not grid.is_configured
        assert not grid.fields_match()
        assert math.isnan(grid.delta_x)
        assert grid.col_for_x(0.0) == -1
        assert math.isnan(grid.x_for_col(0))
        assert grid.rect is None

    def test_reconfigure_discards_everything(self, grid):
        grid.set_voltage(5, 5, 1.0)
        grid.store_results(np.ones((11, 11)), np.ones((11, 11)), np.zeros((11, 11)))
        grid.configure(Rect(0.0, 0.0, 4.0, 4.0), rows=5, cols=5)
        assert not grid.is_conductor(1, 1)
        assert not grid.is_solved
        assert math.isnan(grid.max(GridProperty.RESULTANT_VOLTAGE))

    def test_moving_the_workspace_keeps_inputs_but_drops_results(self, grid):
        grid.set_voltage(2, 3, 1.0)
        grid.store_results(np.ones((11, 11)), np.ones((11, 11)), np.zeros((11, 11)))
        grid.set_workspace_origin(Point(-5.0, -5.0))
        assert grid.is_conductor(2, 3)
        assert not grid.is_solved
        assert grid.point_for_node(0, 0) == Point(-5.0, -5.0)

        grid.set_workspace_size(Size(20.0, 5.0))
        assert grid.delta_x == 2.0
        assert grid.delta_y == 0.5
        with pytest.raises(InvalidConfigurationError):
            grid.set_workspace_size(Size(-1.0, 5.0))


class TestCoordinateMapping:
    def test_round_trip_on_node(self, grid):
        assert grid.col_for_x(5.0) == 5
        assert grid.x_for_col(grid.col_for_x(5.0)) == 5.0
        assert grid.y_for_row(grid.row_for_y(7.0)) == 7.0

    def test_every_node_round_trips(self):
        grid = GridSpace(Rect(-2.5, 1.0, 7.5, 3.0), rows=7, cols=16)
        for c in range(grid.col_count):
            assert grid.col_for_x(grid.x_for_col(c)) == c
        for r in range(grid.row_count):
            assert grid.row_for_y(grid.y_for_row(r)) == r

    def test_nearest_node(self, grid):
        assert grid.col_for_x(5.4) == 5
        assert grid.col_for_x(5.6) == 6
        assert grid.row_for_y(0.2) == 0

    def test_out_of_range(self, grid):
        assert grid.col_for_x(-1.0) == -1
        assert grid.col_for_x(11.0) == -1
        assert grid.row_for_y(-0.6) == -1
        assert math.isnan(grid.x_for_col(100))
        assert math.isnan(grid.x_for_col(-1))
        assert math.isnan(grid.y_for_row(11))

    def test_node_point_mapping(self, grid):
        assert grid.node_for_point(Point(3.0, 8.0)) == (8, 3)
        assert grid.node_for_point(Point(3.0, 80.0)) == (-1, -1)
        assert grid.node_for_point(Point(-3.0, 8.0)) == (-1, -1)
        assert grid.point_for_node(8, 3) == Point(3.0, 8.0)
        off = grid.point_for_node(11, 0)
        assert math.isnan(off.x) and math.isnan(off.y)

    def test_node_coordinates(self):
        grid = GridSpace(Rect(1.0, 2.0, 2.0, 4.0), rows=3, cols=3)
        xs, ys = grid.node_coordinates()
        assert xs.shape == (3, 3)
        np.testing.assert_array_equal(xs[0], [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(ys[:, 0], [2.0, 4.0, 6.0])

    def test_node_coordinates_of_unconfigured_grid(self):
        xs, ys = GridSpace().node_coordinates()
        assert xs.shape == (0, 0)
        assert ys.shape == (0, 0)


class TestProperties:
    def test_defaults_before_any_shape(self, grid):
        assert grid.value_at(GridProperty.EPSILON_R, 4, 4) == 1.0
        assert grid.value_at(GridProperty.RHO, 4, 4) == 0.0
        assert math.isnan(grid.value_at(GridProperty.FIXED_VOLTAGE, 4, 4))
        assert math.isnan(grid.value_at(GridProperty.RESULTANT_VOLTAGE, 4, 4))
        assert not grid.has_value_at(GridProperty.EPSILON_R, 4, 4)
        assert not grid.is_conductor(4, 4)

    def test_accumulating_writes(self, grid):
        grid.add_epsilon_r(1, 1, 3.0)
        grid.add_epsilon_r(1, 1, 2.0)
        grid.add_rho(1, 1, -1.0)
        grid.add_rho(1, 1, -1.0)
        assert grid.value_at(GridProperty.EPSILON_R, 1, 1) == 5.0
        assert grid.value_at(GridProperty.RHO, 1, 1) == -2.0

    def test_set_overwrites(self, grid):
        grid.set_voltage(0, 0, 1.0)
        grid.set_voltage(0, 0, -2.0)
        grid.set_epsilon_r(0, 0, 7.0)
        grid.set_rho(0, 0, 3.0)
        assert grid.value_at(GridProperty.FIXED_VOLTAGE, 0, 0) == -2.0
        assert grid.value_at(GridProperty.EPSILON_R, 0, 0) == 7.0
        assert grid.value_at(GridProperty.RHO, 0, 0) == 3.0
        assert grid.is_conductor(0, 0)

    def test_point_addressed_reads(self, grid):
        grid.set_voltage(3, 2, 9.0)
        assert grid.value_at_point(GridProperty.FIXED_VOLTAGE, Point(2.1, 2.9)) == 9.0
        assert math.isnan(grid.value_at_point(GridProperty.FIXED_VOLTAGE, Point(-4.0, 2.9)))

    def test_out_of_range_writes_and_reads(self, grid):
        assert grid.set_voltage(11, 0, 1.0) is False
        assert grid.add_rho(0, -1, 1.0) is False
        assert math.isnan(grid.value_at(GridProperty.EPSILON_R, 20, 20))

    def test_bulk_min_max_and_arrays(self, grid):
        grid.add_epsilon_r(0, 0, 2.0)
        grid.add_epsilon_r(10, 10, 6.0)
        assert grid.min(GridProperty.EPSILON_R) == 2.0
        assert grid.max(GridProperty.EPSILON_R) == 6.0
        er = grid.as_array(GridProperty.EPSILON_R)
        assert er.shape == (11, 11)
        assert er[5, 5] == 1.0
        assert er[10, 10] == 6.0
        # A copy, not a view onto the grid
        er[5, 5] = 100.0
        assert grid.value_at(GridProperty.EPSILON_R, 5, 5) == 1.0

    def test_conductor_mask(self, grid):
        grid.set_voltage(2, 3, 0.0)
        mask = grid.conductor_mask()
        assert mask.dtype == np.bool_
        assert mask[2, 3]
        assert mask.sum() == 1

    def test_clear(self, grid):
        grid.set_voltage(2, 3, 1.0)
        grid.add_rho(2, 3, 1.0)
        grid.store_results(np.ones((11, 11)), np.ones((11, 11)), np.zeros((11, 11)))
        assert grid.is_solved
        grid.clear()
        assert not grid.is_conductor(2, 3)
        assert not grid.is_solved
        assert grid.row_count == 11

    def test_store_results_checks_shape(self, grid):
        with pytest.raises(ValueError):
            grid.store_results(np.ones((3, 3)), np.ones((3, 3)), np.ones((3, 3)))
