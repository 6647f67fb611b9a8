"""
Tests for vantage.core module.

These tests verify the sensor models, discretization and the visibility
matrix construction.
"""

import pytest
import numpy as np


def _enclosed_cell_map():
    """7x7 free map with a one-pixel room at (3, 3) walled on all sides."""
    from vantage.maps import OccupancyMap

    grid = np.ones((7, 7), dtype=bool)
    grid[2:5, 2:5] = False
    grid[3, 3] = True
    return OccupancyMap(grid)


class TestFOVModel:
    """Tests for FOVModel class."""

    def test_omnidirectional(self):
        """Test the 360 degree preset."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel.omnidirectional(2.0)

        assert fov.max_angle == np.pi
        assert fov.min_range == 0.0
        assert fov.max_range == 2.0
        assert fov.num_vertices == 16
        # The polygon circumscribes the sensing disc
        distances = np.hypot(fov.footprint[:, 0], fov.footprint[:, 1])
        assert np.all(distances >= 2.0)

    def test_frustum(self):
        """Test the forward-looking wedge preset."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel.frustum(hfov=np.deg2rad(90), max_range=2.0, min_range=0.3)

        assert abs(fov.max_angle_degrees - 45.0) < 1e-9
        assert fov.min_range == 0.3
        assert fov.max_range == 2.0
        assert fov.boresight == (1.0, 0.0)

    def test_from_footprint(self):
        """Boresight, half-angle and ranges are derived from the polygon."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel.from_footprint([(1, -1), (3, -1), (3, 1), (1, 1)])

        assert fov.boresight == (2.0, 0.0)
        assert abs(fov.max_angle - np.pi / 4) < 1e-9
        assert abs(fov.min_range - np.sqrt(2)) < 1e-9
        assert abs(fov.max_range - np.sqrt(10)) < 1e-9

    def test_centered_footprint_is_omnidirectional(self):
        """A footprint centered on the robot has no preferred direction."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel.from_footprint([(-1, -1), (1, -1), (1, 1), (-1, 1)])

        assert fov.max_angle == np.pi

    def test_explicit_zero_boresight_rejected(self):
        """Only a derived centroid falls back to omnidirectional; a given zero boresight is an error."""
        from vantage.core.sensors import FOVModel

        square = [(-1, -1), (1, -1), (1, 1), (-1, 1)]

        with pytest.raises(ValueError, match="boresight"):
            FOVModel.from_footprint(square, boresight=(0.0, 0.0))

    def test_validation(self):
        """Invalid models are rejected."""
        from vantage.core.sensors import FOVModel

        triangle = [(0, 0), (1, -1), (1, 1)]

        with pytest.raises(ValueError):
            FOVModel(footprint=[(0, 0), (1, 0)])
        with pytest.raises(ValueError):
            FOVModel(footprint=triangle, boresight=(0.0, 0.0))
        with pytest.raises(ValueError):
            FOVModel(footprint=triangle, min_range=2.0, max_range=1.0)
        with pytest.raises(ValueError):
            FOVModel(footprint=triangle, max_angle=4.0)

    def test_transform(self):
        """Footprint is rotated by the heading and translated to the pose."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel(footprint=[(1, 0), (0, 1), (-1, 0)])
        placed = fov.transform(2.0, 3.0, np.pi / 2)

        np.testing.assert_allclose(placed[0], [2.0, 4.0], atol=1e-12)
        np.testing.assert_allclose(placed[1], [1.0, 3.0], atol=1e-12)

    def test_serialization(self):
        """Test to_dict and from_dict."""
        from vantage.core.sensors import FOVModel

        fov = FOVModel.frustum(hfov=1.2, max_range=3.0)
        fov2 = FOVModel.from_dict(fov.to_dict())

        np.testing.assert_array_equal(fov2.footprint, fov.footprint)
        assert fov2.max_angle == fov.max_angle
        assert fov2.max_range == fov.max_range


class TestCandidatePose:
    """Tests for CandidatePose and Pose2D."""

    def test_to_world(self):
        """World pose uses the map resolution and origin."""
        from vantage.core.sensors import CandidatePose
        from vantage.maps import OccupancyMap

        occ = OccupancyMap(np.ones((10, 10), dtype=bool), resolution=0.5, origin=(1.0, 2.0))
        pose = CandidatePose(4, 6, np.pi).to_world(occ)

        assert pose.x == 3.0
        assert pose.y == 5.0
        assert pose.theta == np.pi
        assert abs(pose.theta_degrees - 180.0) < 1e-9

    def test_serialization(self):
        """Test to_dict and from_dict."""
        from vantage.core.sensors import CandidatePose, candidates_to_array

        pose = CandidatePose(3, 7, 1.5)
        pose2 = CandidatePose.from_dict(pose.to_dict())

        assert pose2 == pose
        assert candidates_to_array([pose, pose2]).shape == (2, 3)


class TestDiscretization:
    """Tests for cell and candidate generation."""

    def test_unit_cells_row_major(self):
        """Unit cells cover every free pixel, row by row."""
        from vantage.core.discretization import discretize
        from vantage.maps import create_empty_map

        cells = discretize(create_empty_map(3, 3), cell_size=1)

        assert cells.shape == (9, 2)
        np.testing.assert_array_equal(cells[:4], [[0, 0], [1, 0], [2, 0], [0, 1]])

    def test_cell_centers(self):
        """Centers start half a cell inside the region."""
        from vantage.core.discretization import discretize
        from vantage.maps import create_empty_map

        cells = discretize(create_empty_map(5, 5), cell_size=2)

        np.testing.assert_array_equal(cells, [[1, 1], [3, 1], [1, 3], [3, 3]])

    def test_occupied_centers_excluded(self):
        """A center on an occupied pixel is not a cell."""
        from vantage.core.discretization import discretize
        from vantage.maps import create_empty_map, add_rectangles

        occ = add_rectangles(create_empty_map(5, 5), [(3, 1, 3, 1)])
        cells = discretize(occ, cell_size=2)

        assert len(cells) == 3
        assert [3, 1] not in cells.tolist()

    def test_bounding_region(self):
        """Cells are restricted to the (inclusive) region."""
        from vantage.core.discretization import discretize
        from vantage.maps import create_empty_map

        cells = discretize(create_empty_map(10, 10), cell_size=1, bounding_region=(2, 2, 5, 5))

        assert len(cells) == 16
        assert cells[:, 0].min() == 2
        assert cells[:, 1].max() == 5

    def test_degenerate_input(self):
        """A fully occupied region yields no cells."""
        from vantage.core.discretization import discretize
        from vantage.exceptions import DegenerateInput
        from vantage.maps import OccupancyMap

        occ = OccupancyMap(np.zeros((4, 4), dtype=bool))

        with pytest.raises(DegenerateInput):
            discretize(occ, cell_size=1)

    def test_invalid_parameters(self):
        """Test parameter validation."""
        from vantage.core.discretization import discretize
        from vantage.maps import create_empty_map

        occ = create_empty_map(4, 4)

        with pytest.raises(ValueError):
            discretize(occ, cell_size=0)
        with pytest.raises(ValueError):
            discretize(occ, cell_size=1, bounding_region=(10, 10, 20, 20))

    def test_candidate_angles(self):
        """Headings are multiples of the step in [0, 2*pi)."""
        from vantage.core.discretization import candidate_angles

        np.testing.assert_allclose(candidate_angles(np.pi / 2), [0, np.pi / 2, np.pi, 1.5 * np.pi])
        assert len(candidate_angles(2 * np.pi / 3)) == 3
        np.testing.assert_array_equal(candidate_angles(2 * np.pi), [0.0])
        assert np.all(candidate_angles(0.1) < 2 * np.pi)

        with pytest.raises(ValueError):
            candidate_angles(0.0)

    def test_generate_candidates_cell_major(self):
        """All headings of a cell come before the next cell."""
        from vantage.core.discretization import generate_candidates

        cells = np.array([[1, 1], [3, 1]])
        candidates = generate_candidates(cells, np.pi)

        assert len(candidates) == 4
        assert candidates[1].position == (1, 1)
        assert candidates[1].theta == np.pi
        assert candidates[2].position == (3, 1)
        assert candidates[2].theta == 0.0


class TestBresenham:
    """Tests for line rasterization and line of sight."""

    def test_endpoints_included(self):
        """Both endpoints are part of the line."""
        from vantage.core.visibility import bresenham_line

        xs, ys = bresenham_line(0, 0, 3, 1)

        assert list(zip(xs.tolist(), ys.tolist())) == [(0, 0), (1, 0), (2, 1), (3, 1)]

    def test_steep_and_reversed(self):
        """Steep lines step once per row, in any direction."""
        from vantage.core.visibility import bresenham_line

        xs, ys = bresenham_line(2, 5, 1, 0)

        assert len(xs) == 6
        assert (xs[0], ys[0]) == (2, 5)
        assert (xs[-1], ys[-1]) == (1, 0)
        assert np.all(np.abs(np.diff(ys)) == 1)

    def test_single_pixel(self):
        """A line from a pixel to itself is that pixel."""
        from vantage.core.visibility import bresenham_line

        xs, ys = bresenham_line(4, 4, 4, 4)

        assert xs.tolist() == [4]
        assert ys.tolist() == [4]

    def test_line_of_sight(self):
        """Any occupied pixel on the line blocks it."""
        from vantage.core.visibility import has_line_of_sight

        free = np.ones((5, 5), dtype=bool)
        free[2, 2] = False

        assert not has_line_of_sight(free, 0, 0, 4, 4)
        assert not has_line_of_sight(free, 2, 0, 2, 4)
        assert has_line_of_sight(free, 0, 0, 4, 0)
        assert not has_line_of_sight(free, 2, 2, 2, 2)


class TestVisibility:
    """Tests for the visibility matrix."""

    @pytest.fixture
    def grid_3x3(self):
        """3x3 free map with unit cells and one heading per cell."""
        from vantage.core.discretization import discretize, generate_candidates
        from vantage.maps import create_empty_map

        occ = create_empty_map(3, 3)
        cells = discretize(occ, cell_size=1)
        candidates = generate_candidates(cells, 2 * np.pi)
        return occ, cells, candidates

    def test_omnidirectional_neighbourhood(self, grid_3x3):
        """A unit-range 360 degree sensor sees its cell and the 4-neighbours."""
        from vantage.core.sensors import FOVModel
        from vantage.core.visibility import build_visibility

        occ, cells, candidates = grid_3x3
        V = build_visibility(occ, cells, candidates, FOVModel.omnidirectional(1.0))

        assert V.shape == (9, 9)
        assert V.dtype == np.uint8
        np.testing.assert_array_equal(V, V.T)
        # corners, edges, center
        assert V[0].sum() == 3
        assert V[1].sum() == 4
        assert V[4].sum() == 5
        assert V[0, 8] == 0

    def test_read_only_and_idempotent(self, grid_3x3):
        """Rebuilding with the same inputs gives the same matrix."""
        from vantage.core.sensors import FOVModel
        from vantage.core.visibility import build_visibility

        occ, cells, candidates = grid_3x3
        fov = FOVModel.omnidirectional(1.0)
        V1 = build_visibility(occ, cells, candidates, fov)
        V2 = build_visibility(occ, cells, candidates, fov)

        np.testing.assert_array_equal(V1, V2)
        assert not V1.flags.writeable

    def test_range_bounds_inclusive(self):
        """A cell exactly at min_range == max_range is in range."""
        from vantage.core.discretization import discretize
        from vantage.core.sensors import CandidatePose, FOVModel
        from vantage.core.visibility import build_visibility
        from vantage.maps import create_empty_map

        occ = create_empty_map(1, 5, resolution=0.5)
        cells = discretize(occ, cell_size=1)
        V = build_visibility(
            occ, cells, [CandidatePose(0, 0, 0.0)], FOVModel.omnidirectional(3.0),
            min_range=1.0, max_range=1.0,
        )

        np.testing.assert_array_equal(V[:, 0], [0, 0, 1, 0, 0])

    def test_angular_limit(self):
        """Cells behind or beside a narrow sensor are not visible."""
        from vantage.core.discretization import discretize
        from vantage.core.sensors import CandidatePose, FOVModel
        from vantage.core.visibility import build_visibility
        from vantage.maps import create_empty_map

        occ = create_empty_map(5, 5)
        cells = discretize(occ, cell_size=1)
        fov = FOVModel.frustum(hfov=np.deg2rad(90), max_range=3.0)
        V = build_visibility(occ, cells, [CandidatePose(2, 2, 0.0)], fov)

        index = {tuple(c): i for i, c in enumerate(cells.tolist())}
        assert V[index[(4, 2)], 0] == 1  # ahead
        assert V[index[(2, 2)], 0] == 1  # own cell
        assert V[index[(0, 2)], 0] == 0  # behind
        assert V[index[(2, 4)], 0] == 0  # 90 degrees off

    def test_heading_rotates_view(self):
        """Turning the sensor by pi/2 turns what it sees."""
        from vantage.core.discretization import discretize
        from vantage.core.sensors import CandidatePose, FOVModel
        from vantage.core.visibility import build_visibility
        from vantage.maps import create_empty_map

        occ = create_empty_map(5, 5)
        cells = discretize(occ, cell_size=1)
        fov = FOVModel.frustum(hfov=np.deg2rad(60), max_range=3.0)
        V = build_visibility(occ, cells, [CandidatePose(2, 2, np.pi / 2)], fov)

        index = {tuple(c): i for i, c in enumerate(cells.tolist())}
        assert V[index[(2, 4)], 0] == 1
        assert V[index[(4, 2)], 0] == 0

    def test_walls_block_visibility(self):
        """A wall hides the cells behind it."""
        from vantage.core.discretization import discretize, generate_candidates
        from vantage.core.sensors import FOVModel
        from vantage.core.visibility import build_visibility
        from vantage.maps import create_empty_map, add_wall_lines

        occ = add_wall_lines(create_empty_map(5, 9), [((4, 0), (4, 4))])
        cells = discretize(occ, cell_size=1)
        candidates = generate_candidates(cells, 2 * np.pi)
        V = build_visibility(occ, cells, candidates, FOVModel.omnidirectional(10.0))

        left = cells[:, 0] < 4
        right = cells[:, 0] > 4
        assert V[np.ix_(left, right)].sum() == 0
        assert V[np.ix_(left, left)].all()

    def test_enclosed_cell_is_unobservable(self):
        """A walled-in cell is never visible when a pose cannot see its own cell."""
        from vantage.core.discretization import discretize, generate_candidates
        from vantage.core.sensors import FOVModel
        from vantage.core.visibility import build_visibility, find_unobservable_cells

        occ = _enclosed_cell_map()
        cells = discretize(occ, cell_size=1)
        candidates = generate_candidates(cells, np.pi / 2)
        V = build_visibility(occ, cells, candidates, FOVModel.omnidirectional(10.0), min_range=0.5)

        center = cells.tolist().index([3, 3])
        assert V[center].sum() == 0
        assert center in find_unobservable_cells(V).tolist()

    def test_footprint_clamped_to_map(self):
        """Transformed footprints stay inside the map bounds."""
        from vantage.core.sensors import CandidatePose, FOVModel
        from vantage.core.visibility import transform_footprint
        from vantage.maps import create_empty_map

        occ = create_empty_map(5, 6)
        polygon = transform_footprint(FOVModel.omnidirectional(4.0), CandidatePose(0, 0, 0.3), occ)

        assert polygon[:, 0].min() >= 0 and polygon[:, 0].max() <= 6
        assert polygon[:, 1].min() >= 0 and polygon[:, 1].max() <= 5

    def test_compute_coverage(self):
        """Test coverage statistics for a selection."""
        from vantage.core.visibility import compute_coverage

        V = np.array([[1, 1, 0], [0, 1, 0], [0, 0, 1]], dtype=np.uint8)
        stats = compute_coverage(V, [0, 1])

        assert abs(stats["coverage"] - 2 / 3) < 1e-12
        assert stats["covered_cells"] == 2
        assert stats["total_cells"] == 3
        assert stats["redundancy"] == 1.5
        assert stats["uncovered_cells"].tolist() == [2]

        assert compute_coverage(V, [])["coverage"] == 0.0
