"""Mesh readers and writers."""

from __future__ import annotations

import numpy as np
import pytest

from mdenoise.formats import (
    MeshFormatError,
    UnsupportedFormatError,
    read_mesh,
    split_extension,
    triangulate_xy,
    write_mesh,
)
from mdenoise.formats.esri import read_esri, write_esri
from mdenoise.formats.vtk_formats import to_polydata
from mdenoise.synthetic import add_normal_noise, make_cube_mesh

ESRI_GRID = """ncols 3
nrows 3
xllcorner 100.0
yllcorner 200.0
cellsize 2.0
NODATA_value -9999
1 2 3
4 5 6
7 8 9
"""


def _noisy_cube():
    verts, faces = make_cube_mesh(2)
    return add_normal_noise(verts, faces, 0.05, seed=2), faces


def _write(path, text: str) -> str:
    path.write_text(text)
    return str(path)


@pytest.mark.parametrize("ext", [".off", ".ply2", ".obj"])
def test_text_format_round_trip(tmp_path, ext) -> None:
    verts, faces = _noisy_cube()
    path = str(tmp_path / f"mesh{ext}")

    write_mesh(path, verts, faces)
    mesh = read_mesh(path)

    assert np.allclose(mesh.vertices, verts, atol=1e-6)
    assert np.array_equal(mesh.faces, faces)
    assert mesh.grid is None


def test_obj_quads_are_split(tmp_path) -> None:
    path = _write(tmp_path / "quad.obj", "# quad\nv 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n")
    mesh = read_mesh(path)

    assert mesh.vertices.shape == (4, 3)
    assert np.allclose(mesh.vertices[2], [1.0, 1.0, 0.0])
    # two triangles sharing the diagonal 0-2
    assert sorted(sorted(f) for f in mesh.faces.tolist()) == [[0, 1, 2], [0, 2, 3]]


@pytest.mark.parametrize("record", ["vt 0 0", "vn 0 0 1"])
def test_obj_with_vertex_attributes_is_rejected(tmp_path, record) -> None:
    path = _write(tmp_path / "tri.obj", f"v 0 0 0\nv 1 0 0\nv 0 1 0\n{record}\nf 1 2 3\n")
    with pytest.raises(MeshFormatError):
        read_mesh(path)


def test_smf_triangle_lines(tmp_path) -> None:
    path = _write(tmp_path / "tri.smf", "v 0 0 0\nv 1 0 0\nv 0 1 0\nt 1 2 -1\n")
    mesh = read_mesh(path)
    assert mesh.faces.tolist() == [[0, 1, 2]]


def test_smf_rejects_polygons(tmp_path) -> None:
    path = _write(tmp_path / "quad.smf", "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nf 1 2 3 4\n")
    with pytest.raises(MeshFormatError):
        read_mesh(path)


def test_gts_faces_from_edges(tmp_path) -> None:
    path = _write(
        tmp_path / "tri.gts",
        "3 3 1\n0 0 0\n1 0 0\n0 1 0\n1 2\n2 3\n3 1\n1 2 3\n",
    )
    mesh = read_mesh(path)
    assert np.allclose(mesh.vertices, [[0, 0, 0], [1, 0, 0], [0, 1, 0]])
    assert mesh.faces.tolist() == [[0, 1, 2]]


@pytest.mark.parametrize("face", ["1 9 3", "1", "x 2 3"])
def test_gts_bad_face_line(tmp_path, face) -> None:
    path = _write(
        tmp_path / "tri.gts",
        f"3 3 1\n0 0 0\n1 0 0\n0 1 0\n1 2\n2 3\n3 1\n{face}\n",
    )
    with pytest.raises(MeshFormatError):
        read_mesh(path)


def test_off_rejects_bad_header_and_indices(tmp_path) -> None:
    with pytest.raises(MeshFormatError):
        read_mesh(_write(tmp_path / "a.off", "COFF?\n"))
    with pytest.raises(MeshFormatError):
        read_mesh(_write(tmp_path / "b.off", "OFF\n3 1 0\n0 0 0\n1 0 0\n0 1 0\n3 0 1 7\n"))


def test_off_keeps_vertex_order(tmp_path) -> None:
    # duplicate and unreferenced vertices must survive the load
    path = _write(
        tmp_path / "tri.off",
        "OFF\n5 1 0\n5 5 5\n0 0 0\n1 0 0\n0 1 0\n0 0 0\n3 1 2 3\n",
    )
    mesh = read_mesh(path)
    assert mesh.vertices.shape == (5, 3)
    assert np.allclose(mesh.vertices[0], [5.0, 5.0, 5.0])
    assert mesh.faces.tolist() == [[1, 2, 3]]


def test_extension_handling(tmp_path) -> None:
    assert split_extension("dir/Model.PLY2") == ("dir/Model", ".ply2")
    assert split_extension("scan.v2_final") == ("scan.v2_final", "")
    assert split_extension("noext") == ("noext", "")

    with pytest.raises(UnsupportedFormatError):
        read_mesh(str(tmp_path / "mesh.dae"))
    with pytest.raises(UnsupportedFormatError):
        write_mesh(str(tmp_path / "mesh.stl"), np.zeros((3, 3)), [[0, 1, 2]])

    # a missing extension means OFF
    verts, faces = _noisy_cube()
    write_mesh(str(tmp_path / "mesh.off"), verts, faces)
    assert read_mesh(str(tmp_path / "mesh")).faces.shape == faces.shape


def test_xyz_is_triangulated_counter_clockwise(tmp_path) -> None:
    rng = np.random.default_rng(4)
    points = np.column_stack([rng.uniform(0, 10, size=(60, 2)), rng.normal(size=60)])
    path = str(tmp_path / "cloud.xyz")
    with open(path, "w") as fh:
        fh.write("x y z\n")
        np.savetxt(fh, points, fmt="%.6f")

    mesh = read_mesh(path)
    assert mesh.vertices.shape == (60, 3)
    assert mesh.faces.shape[0] > 0

    xy = mesh.vertices[:, :2]
    a, b, c = (xy[mesh.faces[:, i]] for i in range(3))
    signed = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    assert (signed > 0).all()


def test_collinear_points_cannot_be_triangulated() -> None:
    line = np.column_stack([np.arange(5.0), np.arange(5.0), np.zeros(5)])
    with pytest.raises(MeshFormatError):
        triangulate_xy(line)
    with pytest.raises(MeshFormatError):
        triangulate_xy(line[:2])


def test_esri_grid_to_mesh(tmp_path) -> None:
    mesh = read_esri(_write(tmp_path / "dem.asc", ESRI_GRID))

    assert mesh.vertices.shape == (9, 3)
    assert mesh.faces.shape == (8, 3)
    # (row * cellsize, col * cellsize, elevation)
    assert np.allclose(mesh.vertices[4], [2.0, 2.0, 5.0])
    assert mesh.grid.nrows == 3 and mesh.grid.ncols == 3
    assert mesh.grid.xllcorner == 100.0 and mesh.grid.nodata_value == -9999.0


def test_esri_nodata_corner_drops_one_triangle(tmp_path) -> None:
    mesh = read_esri(_write(tmp_path / "dem.asc", ESRI_GRID.replace("\n1 2 3", "\n-9999 2 3")))

    assert mesh.vertices.shape == (8, 3)
    assert mesh.faces.shape == (7, 3)
    assert mesh.grid.index[0, 0] == -1
    # the first cell keeps the triangle of its three valid corners
    assert mesh.faces[0].tolist() == [0, 3, 2]


def test_esri_cell_diagonal_follows_elevation(tmp_path) -> None:
    header = "ncols 2\nnrows 2\nxllcorner 0\nyllcorner 0\ncellsize 1\n"

    steep = read_esri(_write(tmp_path / "steep.asc", header + "0 5\n6 2\n"))
    assert steep.faces.tolist() == [[0, 1, 2], [1, 3, 2]]

    gentle = read_esri(_write(tmp_path / "gentle.asc", header + "0 1\n1 0\n"))
    assert gentle.faces.tolist() == [[1, 3, 0], [0, 3, 2]]
    assert gentle.grid.nodata_value is None


def test_esri_write_keeps_header_and_nodata(tmp_path) -> None:
    src = _write(tmp_path / "dem.asc", ESRI_GRID.replace("\n1 2 3", "\n-9999 2 3"))
    mesh = read_esri(src)

    raised = mesh.vertices.copy()
    raised[:, 2] += 0.5
    out = str(tmp_path / "out.asc")
    write_esri(out, raised, mesh.grid)

    text = open(out).read()
    assert text.startswith("ncols          3\nnrows          3\n")
    assert "NODATA_value" in text

    again = read_esri(out)
    assert np.array_equal(again.grid.index, mesh.grid.index)
    assert np.allclose(again.vertices[:, 2], mesh.vertices[:, 2] + 0.5)


def test_esri_output_needs_a_grid(tmp_path) -> None:
    verts, faces = _noisy_cube()
    with pytest.raises(MeshFormatError):
        write_mesh(str(tmp_path / "out.asc"), verts, faces)


def test_truncated_esri_grid(tmp_path) -> None:
    with pytest.raises(MeshFormatError):
        read_esri(_write(tmp_path / "bad.asc", "ncols 3\nnrows 3\n"))
    with pytest.raises(MeshFormatError):
        read_esri(_write(tmp_path / "short.asc", ESRI_GRID.replace("7 8 9\n", "")))


@pytest.mark.parametrize(
    "old, new",
    [
        ("NODATA_value -9999", "NODATA_value abc"),
        ("xllcorner 100.0", "xllcorner zz"),
        ("yllcorner 200.0", "yllcorner 2e"),
        ("ncols 3", "ncols 3.5"),
        ("ncols 3", "ncols -3"),
    ],
)
def test_esri_bad_header_value(tmp_path, old, new) -> None:
    with pytest.raises(MeshFormatError):
        read_esri(_write(tmp_path / "bad.asc", ESRI_GRID.replace(old, new)))


def test_ply_round_trip(tmp_path) -> None:
    verts, faces = _noisy_cube()
    path = str(tmp_path / "mesh.ply")

    write_mesh(path, verts, faces)
    mesh = read_mesh(path)

    assert np.allclose(mesh.vertices, verts, atol=1e-5)
    assert np.array_equal(mesh.faces, faces)


def test_stl_corners_are_merged(tmp_path) -> None:
    verts, faces = make_cube_mesh(1)
    path = str(tmp_path / "cube.stl")
    to_polydata(verts, faces).save(path)

    mesh = read_mesh(path)
    assert mesh.vertices.shape == (8, 3)
    assert mesh.faces.shape == (12, 3)
    assert np.allclose(np.sort(mesh.vertices, axis=0), np.sort(verts, axis=0))
