import argparse
import os
import sys

import numpy as np

# Allow running this file directly via `python scripts/generate_synthetic_data.py`
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mdenoise.formats import write_mesh
from mdenoise.synthetic import add_normal_noise, cube_edge_mask, make_crease_mesh, make_cube_mesh


def save_synthetic_data(output_dir, noise_level=0.01, subdivisions=8, seed=0):
    """Generate noisy test meshes with sharp features and save them as OFF files."""
    os.makedirs(output_dir, exist_ok=True)
    written = []

    # 1. Noisy Cube (edges and corners kept exact)
    print("Generating Noisy Cube...")
    verts, faces = make_cube_mesh(subdivisions)
    noisy = add_normal_noise(verts, faces, noise_level, seed=seed, mask=~cube_edge_mask(verts))
    for name, v in (("cube.off", verts), ("cubeN.off", noisy)):
        path = os.path.join(output_dir, name)
        write_mesh(path, v, faces)
        written.append(path)

    # 2. Noisy Crease (two planes at a right angle)
    print("Generating Noisy Crease...")
    verts, faces = make_crease_mesh(subdivisions, angle_deg=90.0)
    noisy = add_normal_noise(verts, faces, noise_level, seed=seed + 1)
    for name, v in (("crease.off", verts), ("creaseN.off", noisy)):
        path = os.path.join(output_dir, name)
        write_mesh(path, v, faces)
        written.append(path)

    # 3. Noisy Terrain as a point cloud (two terraces)
    print("Generating Noisy Terrain...")
    rng = np.random.default_rng(seed + 2)
    xy = rng.uniform(0.0, 10.0, size=(400, 2))
    z = np.where(xy[:, 0] > 5.0, 2.0, 0.0) + rng.uniform(-noise_level, noise_level, size=len(xy))
    path = os.path.join(output_dir, "terrainN.xyz")
    with open(path, "w") as f:
        np.savetxt(f, np.column_stack([xy, z]), fmt="%f")
    written.append(path)

    print(f"Synthetic data saved to {output_dir}")
    return written


def main():
    parser = argparse.ArgumentParser(description="Generate noisy meshes for denoising experiments")
    parser.add_argument('--output-dir', default='data/synthetic', help='Directory for the generated files')
    parser.add_argument('--noise', type=float, default=0.01, help='Noise magnitude along vertex normals')
    parser.add_argument('--subdivisions', type=int, default=8, help='Grid resolution of each patch')
    parser.add_argument('--seed', type=int, default=0)
    args = parser.parse_args()

    save_synthetic_data(args.output_dir, args.noise, args.subdivisions, args.seed)


if __name__ == "__main__":
    main()
