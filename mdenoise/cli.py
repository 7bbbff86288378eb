"""
Command-line front end: read a mesh, denoise it, write the result.

    mdenoise -i cylinderN02.ply2
    mdenoise -i cylinderN02.ply2 -n 5 -o cylinderDN
    mdenoise -i cylinderN02.ply2 -t 0.8 -e -v 20 -o cylinderDN.obj
    mdenoise -i Terrain.xyz -o TerrainP -z -n 1
    mdenoise -i my_dem_utm.asc -o my_dem_utmP -n 4
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
import time
from typing import Optional

from .algorithms import DenoiseParams, NeighborhoodType, displacement_summary, mesh_denoise
from .formats import (
    DEFAULT_EXTENSION,
    MeshIOError,
    can_write,
    input_path_and_format,
    read_mesh,
    split_extension,
    write_mesh,
)

logger = logging.getLogger(__name__)

EPILOG = (
    "Supported input types: .gts, .obj, .off, .ply, .ply2, .smf, .stl, .xyz and .asc. "
    "Supported output types: .obj, .off, .ply, .ply2, .xyz and .asc. "
    "Default file extension: .off"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdenoise",
        description="Feature-preserving mesh denoising",
        epilog=EPILOG,
    )
    parser.add_argument('-i', '--input', required=True, help='Input mesh file')
    parser.add_argument('-o', '--output', help='Output file (derived from the input name if omitted)')
    parser.add_argument('-e', '--common-edge', action='store_true',
                        help='Common-edge face neighbourhood (default: common vertex)')
    parser.add_argument('-t', '--threshold', type=float, default=0.4,
                        help='Threshold in (0,1), default 0.4')
    parser.add_argument('-n', '--normal-iterations', type=int, default=20,
                        help='Iterations of normal updating, default 20')
    parser.add_argument('-v', '--vertex-iterations', type=int, default=50,
                        help='Iterations of vertex updating, default 50')
    parser.add_argument('-z', '--z-only', action='store_true',
                        help='Only update the z coordinate of vertices')
    parser.add_argument('--verbose', action='store_true', help='Print per-iteration progress')
    return parser


def default_output_path(input_path: str, params: DenoiseParams) -> str:
    """``<stem>_V_0.40_20_50.<ext>``; formats without a writer become .off."""
    stem, ext = split_extension(input_path)
    tag = "E" if params.neighborhood is NeighborhoodType.COMMON_EDGE else "V"
    if not can_write(ext):
        ext = DEFAULT_EXTENSION
    return (
        f"{stem}_{tag}_{params.threshold:4.2f}_{params.normal_iterations}_"
        f"{params.vertex_iterations}{ext}"
    )


def resolve_output_path(input_path: str, output: str) -> str:
    """Complete a user-given output path.

    Without a known extension the input's one is appended (.off when the
    input format cannot be written). An output naming the input file is
    prefixed with ``ERR`` so the input is never overwritten.
    """
    _, out_ext = split_extension(output)
    if not can_write(out_ext):
        _, in_ext = split_extension(input_path)
        output += in_ext if can_write(in_ext) else DEFAULT_EXTENSION

    if os.path.normcase(output).lower() == os.path.normcase(input_path).lower():
        logger.warning("The input and output file names are the same; prefixing the output with 'ERR'")
        head, tail = os.path.split(output)
        output = os.path.join(head, "ERR" + tail)
    return output


def copy_projection_sidecar(input_path: str, output_path: str) -> Optional[str]:
    """Copy ``<input>.prj`` next to an .asc output, if the input has one."""
    src = split_extension(input_path)[0] + ".prj"
    dst = split_extension(output_path)[0] + ".prj"
    if not os.path.isfile(src):
        logger.info("No .prj file is found.")
        return None
    shutil.copyfile(src, dst)
    return dst


def run(args: argparse.Namespace) -> int:
    input_path, in_ext = input_path_and_format(args.input)

    params = DenoiseParams(
        neighborhood=NeighborhoodType.COMMON_EDGE if args.common_edge else NeighborhoodType.COMMON_VERTEX,
        threshold=args.threshold,
        normal_iterations=args.normal_iterations,
        vertex_iterations=args.vertex_iterations,
        # elevation grids only move vertically
        z_only=args.z_only or in_ext == ".asc",
    ).with_defaults_for_invalid()

    if args.output:
        output_path = resolve_output_path(input_path, args.output)
    else:
        output_path = default_output_path(input_path, params)

    logger.info("Input File: %s", input_path)
    logger.info(
        "Neighbourhood: %s",
        "Common Edge" if params.neighborhood is NeighborhoodType.COMMON_EDGE else "Common Vertex",
    )
    logger.info("Threshold: %f", params.threshold)
    logger.info("n1: %d", params.normal_iterations)
    logger.info("n2: %d", params.vertex_iterations)

    start = time.time()
    mesh = read_mesh(input_path)
    logger.info("Read Model... %10.3f seconds (%d vertices, %d faces)",
                time.time() - start, mesh.vertices.shape[0], mesh.faces.shape[0])

    start = time.time()
    result = mesh_denoise(mesh.vertices, mesh.faces, params)
    logger.info("Denoising Model... %10.3f seconds", time.time() - start)

    summary = displacement_summary(mesh.vertices, result.vertices)
    logger.info("Mean displacement %.6g, max displacement %.6g",
                summary["mean_displacement"], summary["max_displacement"])

    start = time.time()
    write_mesh(output_path, result.vertices, result.faces, grid=mesh.grid)
    if split_extension(output_path)[1] == ".asc":
        copy_projection_sidecar(input_path, output_path)
    logger.info("Saving Model... %10.3f seconds -> %s", time.time() - start, output_path)
    return 0


def main(argv=None) -> int:
    """CLI entrypoint used by the ``mdenoise`` console script."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        return run(args)
    except (MeshIOError, OSError) as exc:
        logger.error("Error: %s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
