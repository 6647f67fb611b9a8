"""
Tests for the vantage-plan command line entry point.
"""

import json

import pytest
import numpy as np


class TestCLI:
    """Tests for vantage.cli.main."""

    def test_room_scenario(self, tmp_path):
        """A synthetic room is planned and the outputs are written."""
        from vantage.cli import main

        exit_code = main([
            "--scenario", "room",
            "--cell-size", "5",
            "--angular-step-deg", "360",
            "--range", "0.5",
            "--output-dir", str(tmp_path),
            "--json",
            "-q",
        ])

        assert exit_code == 0

        with open(tmp_path / "result.json") as f:
            result = json.load(f)
        assert result["coverage"] == 1.0
        assert result["num_cells"] == 48
        assert result["num_poses"] >= 1

        with open(tmp_path / "poses.geojson") as f:
            geojson = json.load(f)
        assert geojson["type"] == "FeatureCollection"
        assert len(geojson["features"]) == result["num_poses"]

    def test_plots(self, tmp_path):
        """--plot writes the placement and convergence figures."""
        from vantage.cli import main

        exit_code = main([
            "--scenario", "corridor",
            "--resolution", "0.1",
            "--cell-size", "4",
            "--angular-step-deg", "360",
            "--range", "0.6",
            "--output-dir", str(tmp_path),
            "--plot",
            "-q",
        ])

        assert exit_code == 0
        assert (tmp_path / "placement.png").exists()
        assert (tmp_path / "convergence.png").exists()

    def test_infeasible_map(self, tmp_path, capsys):
        """An enclosed cell nobody can see gives exit code 2."""
        import yaml
        from vantage.cli import main
        from vantage.maps import OccupancyMap, save_map_image

        grid = np.ones((7, 7), dtype=bool)
        grid[2:5, 2:5] = False
        grid[3, 3] = True
        save_map_image(OccupancyMap(grid), tmp_path / "map.png")

        with open(tmp_path / "config.yaml", "w") as f:
            yaml.safe_dump({
                "fov": {"kind": "frustum", "hfov_degrees": 90.0, "min_range": 0.5, "max_range": 10.0},
                "discretization": {"cell_size": 1, "angular_step_degrees": 90.0},
            }, f)

        exit_code = main([
            "--config", str(tmp_path / "config.yaml"),
            "--map-image", str(tmp_path / "map.png"),
            "--resolution", "1.0",
            "-q",
        ])

        assert exit_code == 2
        assert "Placement failed" in capsys.readouterr().err

    def test_missing_config(self, tmp_path):
        """A missing configuration file is a usage error."""
        from vantage.cli import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "missing.yaml"), "-q"])

        assert exc_info.value.code == 2

    def test_missing_map_image(self, tmp_path, capsys):
        """A missing map image is a usage error, not a traceback."""
        from vantage.cli import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--map-image", str(tmp_path / "missing.png"), "-q"])

        assert exc_info.value.code == 2
        assert "Map image not found" in capsys.readouterr().err

    def test_missing_map_yaml(self, tmp_path, capsys):
        """A missing map descriptor is a usage error."""
        from vantage.cli import main

        with pytest.raises(SystemExit) as exc_info:
            main(["--map-yaml", str(tmp_path / "missing.yaml"), "-q"])

        assert exc_info.value.code == 2
        assert "Map descriptor not found" in capsys.readouterr().err

    def test_overrides(self):
        """Command-line values replace configuration values."""
        from vantage.cli import apply_overrides, build_parser
        from vantage.config import VantageConfig

        args = build_parser().parse_args([
            "--fov", "frustum",
            "--range", "3.0",
            "--bounding-region", "1", "2", "30", "40",
            "--solver", "pulp",
            "--selection-rule", "zero",
            "--drop-unobservable",
        ])
        config = apply_overrides(VantageConfig(), args)

        assert config.fov.kind == "frustum"
        assert config.fov.max_range == 3.0
        assert config.discretization.bounding_region == (1, 2, 30, 40)
        assert config.discretization.drop_unobservable_cells
        assert config.solver.name == "pulp"
        assert config.relaxation.selection_rule == "zero"
        assert config.verbose
