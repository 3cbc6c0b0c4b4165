#!/usr/bin/env python3
"""
Basic usage examples for soap-film-core.

This script builds a few films, relaxes them, and prints how their surface
area evolves.
"""

import math

import numpy as np

from soap_film import (
    FilmConfig,
    FilmSession,
    FramePose,
    FrameRuntime,
    FrameType,
    build_film_topology,
    compute_surface_area,
    create_default_frame,
    create_film_state,
    create_solver_context,
    make_boundary_sampler,
    run_relaxation_step,
)


def example_core_pipeline():
    """Example: Drive topology building and relaxation by hand."""
    print("🫧 Example: Core Pipeline")

    frames = [
        create_default_frame("left", FrameType.CIRCLE, radius=1.15, pose=FramePose(position=(-2.0, 1.1, 0.0))),
        create_default_frame(
            "right",
            FrameType.CIRCLE,
            radius=1.15,
            pose=FramePose(position=(2.1, 0.9, 0.3), rotation=(0.1, -0.2, 0.04)),
        ),
    ]

    topology = build_film_topology([FrameRuntime(frame) for frame in frames], span_subdivisions=18)
    print(f"Vertices: {topology.vertex_count}, triangles: {topology.triangle_count}")

    state = create_film_state(topology, substeps=5, step_size=0.1, damping=0.9)
    context = create_solver_context(state)
    sampler = make_boundary_sampler(frames)

    print(f"Initial area: {compute_surface_area(state.positions, state.indices):.4f}")
    for i in range(40):
        area = run_relaxation_step(state, context, sampler)
        if (i + 1) % 10 == 0:
            print(f"  step {i + 1:3d}: area = {area:.4f}")


def example_session():
    """Example: Use a FilmSession the way an editor would."""
    print("\n🪟 Example: Film Session")

    session = FilmSession(FilmConfig(quality="fast", topology={"span_subdivisions": 12}))
    session.add_frame(FrameType.CIRCLE)
    session.add_frame(FrameType.SQUARE)
    session.add_frame(FrameType.TRIANGLE)
    print(f"Frames: {session.frame_ids}, bridges: {session.topology.mst_edge_count}")

    for i in range(30):
        # Slowly lift the first frame while the film relaxes
        session.set_frame_pose("frame-1", position=(-2.2, 1.2 + 0.02 * i, 0.0))
        area = session.tick(compute_area=True)
        if session.should_refresh_normals(interacting=True):
            print(f"  tick {session.tick_count:3d}: area = {area:.4f}")

    session.dispose()


def example_deformed_frame():
    """Example: Bend a frame out of plane with its control points."""
    print("\n〰️ Example: Deformed Frame")

    session = FilmSession()
    ring = session.add_frame(FrameType.CIRCLE, rebuild=False)
    session.add_frame(FrameType.RECTANGLE, rebuild=False)

    control_points = session.get_frame(ring).control_points
    for index in range(0, len(control_points), 3):
        lifted = control_points[index] + np.array([0.0, 0.0, 0.3 * math.sin(index)])
        session.set_control_point(ring, index, lifted)

    session.rebuild_film()
    for _ in range(20):
        session.tick()
    print(f"Area after 20 ticks: {session.surface_area():.4f}")
    session.dispose()


def main():
    """Run all examples."""
    print("🚀 Soap Film Core - Basic Usage Examples")
    print("=" * 50)

    example_core_pipeline()
    example_session()
    example_deformed_frame()

    print("\n🎉 All examples completed!")


if __name__ == "__main__":
    main()
