"""
One-ring adjacency structures of a triangle mesh.

Four rings are built from the face list alone:

- vertex -> vertex: vertices sharing a face with the vertex
- vertex -> face: faces incident to the vertex
- face -> face (common vertex): faces sharing at least one vertex
- face -> face (common edge): faces sharing a full edge

Both face rings include the face itself; the normal filter takes its baseline
weight from that entry.

Non-manifold input (an edge shared by more than two faces) is not detected.
The common-edge ring then keeps whichever faces are met first and is capped at
four entries; the result is not meaningful for such meshes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

import numpy as np

Ring = List[List[int]]

# self + one neighbor per edge
MAX_EDGE_RING = 4


class NeighborhoodType(str, Enum):
    COMMON_VERTEX = "common_vertex"
    COMMON_EDGE = "common_edge"


def compute_vertex_ring(num_verts: int, faces) -> Ring:
    """For each vertex, the unique vertices that share a face with it."""
    ring: Ring = [[] for _ in range(num_verts)]
    seen = [set() for _ in range(num_verts)]

    for face in faces:
        for i in range(3):
            v = face[i]
            for other in (face[(i + 2) % 3], face[(i + 1) % 3]):
                if other != v and other not in seen[v]:
                    seen[v].add(other)
                    ring[v].append(other)
    return ring


def compute_vertex_face_ring(num_verts: int, faces) -> Ring:
    """For each vertex, the indices of its incident faces in face order."""
    ring: Ring = [[] for _ in range(num_verts)]
    for k, face in enumerate(faces):
        for v in face:
            ring[v].append(k)
    return ring


def compute_face_ring_cv(faces, vertex_face_ring: Ring) -> Ring:
    """
    For each face, all faces sharing at least one vertex with it.

    Faces around the first corner are taken as they are; faces around the
    second corner only when they do not touch the first; faces around the
    third corner only when they touch neither of the first two. A face
    adjacent through two corners is therefore counted once.
    """
    ring: Ring = []
    for a, b, c in faces:
        members = list(vertex_face_ring[a])
        for g in vertex_face_ring[b]:
            if a not in faces[g]:
                members.append(g)
        for g in vertex_face_ring[c]:
            other = faces[g]
            if a not in other and b not in other:
                members.append(g)
        ring.append(members)
    return ring


def compute_face_ring_ce(faces, vertex_face_ring: Ring) -> Ring:
    """
    For each face, itself plus the faces across each of its edges.

    Faces around corner ``a`` that also contain ``b`` or ``c`` give the face
    itself and its neighbors across edges a-b and a-c. The neighbor across
    b-c is the first face around ``b`` containing ``c`` but not ``a``.
    Boundary faces get fewer than four entries.
    """
    ring: Ring = []
    for a, b, c in faces:
        members = []
        for g in vertex_face_ring[a]:
            other = faces[g]
            if b in other or c in other:
                if len(members) == MAX_EDGE_RING:
                    break
                members.append(g)

        if len(members) < MAX_EDGE_RING:
            for g in vertex_face_ring[b]:
                other = faces[g]
                if c in other and a not in other:
                    members.append(g)
                    break
        ring.append(members)
    return ring


def ring_pairs(ring: Ring):
    """
    Flatten a ring into parallel ``(owner, member)`` index arrays.

    Vectorized sweeps use these arrays instead of looping over the ring.
    """
    counts = np.fromiter((len(r) for r in ring), dtype=np.int64, count=len(ring))
    owners = np.repeat(np.arange(len(ring), dtype=np.int64), counts)
    if counts.sum() == 0:
        members = np.zeros(0, dtype=np.int64)
    else:
        members = np.fromiter(
            (m for r in ring for m in r), dtype=np.int64, count=int(counts.sum())
        )
    return owners, members


@dataclass
class MeshTopology:
    """All one-ring structures of a mesh, built once per denoising run."""

    vertex_ring: Ring
    vertex_face_ring: Ring
    face_ring_cv: Ring
    face_ring_ce: Ring

    @classmethod
    def build(cls, num_verts: int, faces) -> "MeshTopology":
        face_list = [tuple(f) for f in np.asarray(faces, dtype=np.int64).reshape(-1, 3).tolist()]

        vertex_ring = compute_vertex_ring(num_verts, face_list)
        vertex_face_ring = compute_vertex_face_ring(num_verts, face_list)
        return cls(
            vertex_ring=vertex_ring,
            vertex_face_ring=vertex_face_ring,
            face_ring_cv=compute_face_ring_cv(face_list, vertex_face_ring),
            face_ring_ce=compute_face_ring_ce(face_list, vertex_face_ring),
        )

    def face_ring(self, neighborhood: NeighborhoodType) -> Ring:
        if NeighborhoodType(neighborhood) is NeighborhoodType.COMMON_EDGE:
            return self.face_ring_ce
        return self.face_ring_cv
