"""
Command-line entry point for sensor placement.

Example:
    vantage-plan --scenario room --cell-size 4 --fov omnidirectional --range 0.5 --plot
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from vantage.config.settings import VantageConfig, load_config
from vantage.exceptions import PlacementError
from vantage.maps.coordinates import poses_to_geojson
from vantage.maps.loader import load_map_image, load_map_yaml
from vantage.maps.occupancy import OccupancyMap
from vantage.maps.synthetic import create_corridor_map, create_empty_map, create_floorplan_map
from vantage.optimization.runner import plan_from_config

logger = logging.getLogger(__name__)

SCENARIOS = ("room", "corridor", "floorplan")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vantage-plan",
        description="Minimal sensing poses covering the free space of an occupancy map",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--map-image', type=str, default=None,
                        help='Grayscale map image (255 = free)')
    source.add_argument('--map-yaml', type=str, default=None,
                        help='map_server style YAML descriptor')
    source.add_argument('--scenario', choices=SCENARIOS, default=None,
                        help='Synthetic map (default: room)')

    parser.add_argument('--config', type=str, default=None,
                        help='YAML or JSON configuration file')
    parser.add_argument('--resolution', type=float, default=None,
                        help='Meters per pixel of the map image or scenario')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for the floorplan scenario')

    parser.add_argument('--fov', choices=['omnidirectional', 'frustum'], default=None,
                        help='Sensor model')
    parser.add_argument('--range', dest='sensor_range', type=float, default=None,
                        help='Sensing range in meters')
    parser.add_argument('--hfov-deg', type=float, default=None,
                        help='Horizontal field of view in degrees (frustum)')

    parser.add_argument('--cell-size', type=int, default=None,
                        help='Cell edge length in pixels')
    parser.add_argument('--angular-step-deg', type=float, default=None,
                        help='Heading sampling step in degrees')
    parser.add_argument('--bounding-region', type=int, nargs=4, default=None,
                        metavar=('MIN_X', 'MIN_Y', 'MAX_X', 'MAX_Y'),
                        help='Pixel box to cover')
    parser.add_argument('--drop-unobservable', action='store_true',
                        help='Drop cells no candidate sees instead of failing')

    parser.add_argument('--solver', choices=['highs', 'pulp'], default=None,
                        help='LP backend')
    parser.add_argument('--selection-rule', choices=['support', 'zero'], default=None,
                        help='Which relaxed values are kept for the final solve')
    parser.add_argument('--max-iterations', type=int, default=None,
                        help='Maximum relaxation iterations')
    parser.add_argument('--sparsity-check-range', type=int, default=None,
                        help='Equal sparsity measures required for convergence')

    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for output files')
    parser.add_argument('--json', action='store_true',
                        help='Write result.json and poses.geojson')
    parser.add_argument('--plot', action='store_true',
                        help='Write placement and convergence plots')
    parser.add_argument('--gif', action='store_true',
                        help='Write a GIF of the relaxation')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Do not print progress')
    return parser


def apply_overrides(config: VantageConfig, args: argparse.Namespace) -> VantageConfig:
    """Overwrite configuration values given on the command line."""
    if args.resolution is not None:
        config.resolution = args.resolution

    if args.fov is not None:
        config.fov.kind = args.fov
    if args.sensor_range is not None:
        config.fov.radius = args.sensor_range
        config.fov.max_range = args.sensor_range
    if args.hfov_deg is not None:
        config.fov.hfov_degrees = args.hfov_deg

    if args.cell_size is not None:
        config.discretization.cell_size = args.cell_size
    if args.angular_step_deg is not None:
        config.discretization.angular_step_degrees = args.angular_step_deg
    if args.bounding_region is not None:
        config.discretization.bounding_region = tuple(args.bounding_region)
    if args.drop_unobservable:
        config.discretization.drop_unobservable_cells = True

    if args.solver is not None:
        config.solver.name = args.solver
    if args.selection_rule is not None:
        config.relaxation.selection_rule = args.selection_rule
    if args.max_iterations is not None:
        config.relaxation.max_iterations = args.max_iterations
    if args.sparsity_check_range is not None:
        config.relaxation.sparsity_check_range = args.sparsity_check_range

    if args.output_dir is not None:
        config.visualization.output_dir = args.output_dir
    if args.gif:
        config.visualization.generate_gifs = True
    config.verbose = not args.quiet
    return config


def load_map(config: VantageConfig, args: argparse.Namespace) -> OccupancyMap:
    """Map from the command line, the configuration, or a synthetic scenario."""
    if args.map_yaml is not None:
        occupancy_map, _ = load_map_yaml(args.map_yaml)
        return occupancy_map

    map_image = args.map_image or (config.map_path if args.scenario is None else None)
    if map_image is not None:
        return load_map_image(
            map_image, resolution=config.resolution, free_threshold=config.free_threshold
        )

    scenario = args.scenario or "room"
    if scenario == "room":
        return create_empty_map(30, 40, resolution=config.resolution, border=1)
    if scenario == "corridor":
        return create_corridor_map(length=60, corridor_width=7, resolution=config.resolution)
    return create_floorplan_map(60, 80, resolution=config.resolution, seed=args.seed)


def write_outputs(result, config: VantageConfig, args: argparse.Namespace) -> None:
    output_dir = Path(config.visualization.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if args.json:
        with open(output_dir / 'result.json', 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        with open(output_dir / 'poses.geojson', 'w') as f:
            json.dump(poses_to_geojson(result.poses), f, indent=2)

    if args.plot or config.visualization.generate_gifs:
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from vantage.visualization import (
            create_relaxation_gif,
            plot_placement,
            plot_sparsity_convergence,
        )

        if args.plot:
            fig = plot_placement(
                result,
                output_path=output_dir / 'placement.png',
                dpi=config.visualization.dpi,
            )
            plt.close(fig)
            fig = plot_sparsity_convergence(
                result.relaxation.sparsity_history,
                num_candidates=result.num_candidates,
                output_path=output_dir / 'convergence.png',
            )
            plt.close(fig)

        if config.visualization.generate_gifs:
            create_relaxation_gif(
                result,
                output_dir / 'relaxation.gif',
                fps=config.visualization.gif_fps,
                max_frames=config.visualization.gif_max_frames,
            )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the placement pipeline from the command line.

    Returns:
        0 on success, 2 when the instance cannot be solved
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = apply_overrides(load_config(args.config), args)
        config.validate()
    except (FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    try:
        occupancy_map = load_map(config, args)
    except (FileNotFoundError, ValueError) as e:
        parser.error(str(e))

    try:
        result = plan_from_config(
            occupancy_map,
            config,
            record_trace=config.visualization.generate_gifs,
        )
    except PlacementError as e:
        logger.error("Placement failed: %s", e)
        print(f"Placement failed: {e}", file=sys.stderr)
        return 2

    if config.verbose:
        print(f"\nSelected {result.num_poses} poses:")
        for i, pose in enumerate(result.poses, 1):
            print(f"  {i:3d}. x={pose.x:8.3f}  y={pose.y:8.3f}  theta={pose.theta_degrees:6.1f} deg")

    if args.json or args.plot or config.visualization.generate_gifs:
        write_outputs(result, config, args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
