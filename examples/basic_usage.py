#!/usr/bin/env python3
"""
Basic usage example for the vantage sensor placement engine.

This script demonstrates the core functionality of the vantage package:
1. Building synthetic occupancy maps
2. Choosing a sensor field of view
3. Running the placement pipeline
4. Visualizing results
"""

import logging
from pathlib import Path

import numpy as np

from vantage import (
    FOVModel,
    InfeasibleInstance,
    plan_sensing_poses,
)
from vantage.maps import (
    add_rectangles,
    create_corridor_map,
    create_empty_map,
    create_floorplan_map,
)
from vantage.visualization import (
    create_relaxation_gif,
    plot_placement,
    plot_sparsity_convergence,
)


def example_room_omnidirectional():
    """Example: 360 degree sensor in an empty room."""
    print("=" * 60)
    print("OMNIDIRECTIONAL SENSOR IN A ROOM")
    print("=" * 60)

    print("\n1. Building the room...")
    occ = create_empty_map(40, 60, resolution=0.05, border=1)
    occ = add_rectangles(occ, [(25, 15, 34, 24)])
    print(f"   Map shape: {occ.shape}")
    print(f"   Free pixels: {occ.free_count}")

    print("\n2. Running placement...")
    result = plan_sensing_poses(
        occ,
        FOVModel.omnidirectional(radius=0.6),
        cell_size=4,
        angular_step=2 * np.pi,
        verbose=True,
    )

    print("\n3. Results:")
    print(f"   Poses: {result.num_poses}")
    print(f"   Coverage: {result.coverage:.1%}")
    print(f"   Runtime: {result.runtime_seconds:.2f}s")

    print("\n   Sensing poses:")
    for i, pose in enumerate(result.poses):
        print(f"   Pose {i+1}: ({pose.x:.2f}, {pose.y:.2f}) m")

    return result


def example_corridor_camera():
    """Example: forward-looking camera in a corridor."""
    print("\n" + "=" * 60)
    print("CAMERA IN A CORRIDOR")
    print("=" * 60)

    occ = create_corridor_map(length=80, corridor_width=9, resolution=0.1)
    fov = FOVModel.frustum(hfov=np.deg2rad(90), max_range=1.5, min_range=0.1)

    print("\n1. Running placement with 8 headings per cell...")
    result = plan_sensing_poses(
        occ,
        fov,
        cell_size=4,
        angular_step=np.deg2rad(45),
        record_trace=True,
        verbose=True,
    )

    print("\n2. Results:")
    print(f"   Poses: {result.num_poses} of {result.num_candidates} candidates")
    for i, pose in enumerate(result.poses):
        print(f"   Pose {i+1}: ({pose.x:.2f}, {pose.y:.2f}) m, heading {pose.theta_degrees:.0f} deg")

    return result


def example_floorplan_with_occlusions():
    """Example: floorplan where some cells may be unreachable."""
    print("\n" + "=" * 60)
    print("FLOORPLAN WITH OCCLUSIONS")
    print("=" * 60)

    occ = create_floorplan_map(80, 100, resolution=0.05, seed=42)
    fov = FOVModel.omnidirectional(radius=0.8)

    print("\n1. Strict run...")
    try:
        result = plan_sensing_poses(occ, fov, cell_size=5, angular_step=2 * np.pi)
        print(f"   Poses: {result.num_poses}")
    except InfeasibleInstance as e:
        print(f"   Infeasible: {len(e.cell_indices)} cells cannot be observed")

        print("\n2. Dropping unobservable cells...")
        result = plan_sensing_poses(
            occ, fov, cell_size=5, angular_step=2 * np.pi,
            drop_unobservable_cells=True,
        )
        print(f"   Poses: {result.num_poses}, dropped cells: {len(result.dropped_cells)}")

    return result


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.WARNING)
    output_dir = Path("outputs/examples")
    output_dir.mkdir(parents=True, exist_ok=True)

    print("VANTAGE SENSOR PLACEMENT EXAMPLES")
    print("=" * 60)

    result1 = example_room_omnidirectional()
    plot_placement(result1, title="Room", output_path=output_dir / "room.png")

    result2 = example_corridor_camera()
    plot_placement(result2, title="Corridor", output_path=output_dir / "corridor.png")
    plot_sparsity_convergence(
        result2.relaxation.sparsity_history,
        num_candidates=result2.num_candidates,
        output_path=output_dir / "corridor_convergence.png",
    )
    create_relaxation_gif(result2, output_dir / "corridor_relaxation.gif")

    result3 = example_floorplan_with_occlusions()
    plot_placement(result3, title="Floorplan", output_path=output_dir / "floorplan.png")

    print("\n" + "=" * 60)
    print(f"All examples completed! Figures in {output_dir}")
    print("=" * 60)


if __name__ == "__main__":
    main()
