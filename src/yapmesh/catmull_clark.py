"""One level of Catmull-Clark subdivision for triangle meshes."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from yapmesh.edit_mesh import Edge, EditMesh
from yapmesh.geom import ZERO3, Vec2, Vec3, add, add2, midpoint, midpoint2, scale2, scale3


def catmull_clark(mesh: EditMesh) -> EditMesh:
    """Subdivide ``mesh`` once, producing six triangles per input triangle.

    Each triangle is split into three quads (corner, two edge points, face
    point) and every quad is emitted as two triangles.  Vertices are shared
    between neighbouring faces so the result can be subdivided again.

    Edge points on interior edges average the edge midpoint with the mean
    of the two face points; open edges use the plain midpoint.  Interior
    vertices move by ``(F + 2R + (n - 3)P) / n`` and boundary vertices by
    ``(E0 + E1 + 6P) / 8``.
    """

    if mesh.is_empty():
        return mesh.copy()

    adj = mesh.build_adjacency()
    face_points = [mesh.face_center(fi) for fi in range(mesh.face_count)]
    face_uvs = [mesh.face_uv_center(fi) for fi in range(mesh.face_count)]

    edge_points: Dict[Edge, Vec3] = {}
    edge_uvs: Dict[Edge, Vec2] = {}
    vertex_edges: Dict[int, List[Edge]] = defaultdict(list)
    boundary_edges: Dict[int, List[Edge]] = defaultdict(list)

    for edge in sorted(adj):
        faces = adj[edge]
        mid = midpoint(mesh.positions[edge.a], mesh.positions[edge.b])
        uv_mid = midpoint2(mesh.uvs[edge.a], mesh.uvs[edge.b])
        if len(faces) == 2:
            fp_avg = midpoint(face_points[faces[0]], face_points[faces[1]])
            edge_points[edge] = midpoint(mid, fp_avg)
            fuv_avg = midpoint2(face_uvs[faces[0]], face_uvs[faces[1]])
            edge_uvs[edge] = add2(scale2(uv_mid, 0.5), scale2(fuv_avg, 0.5))
        else:
            edge_points[edge] = mid
            edge_uvs[edge] = uv_mid
        vertex_edges[edge.a].append(edge)
        vertex_edges[edge.b].append(edge)
        if len(faces) == 1:
            boundary_edges[edge.a].append(edge)
            boundary_edges[edge.b].append(edge)

    vertex_faces: Dict[int, List[int]] = defaultdict(list)
    for fi, tri in enumerate(mesh.triangles):
        for v in tri:
            vertex_faces[v].append(fi)

    result = EditMesh()
    vertex_ids: Dict[int, int] = {}
    for v in sorted(vertex_faces):
        p = mesh.positions[v]
        uv = mesh.uvs[v]
        bedges = boundary_edges.get(v, [])
        if bedges:
            if len(bedges) >= 2:
                e0, e1 = edge_points[bedges[0]], edge_points[bedges[1]]
                pos = scale3(add(add(e0, e1), scale3(p, 6.0)), 1.0 / 8.0)
                u0, u1 = edge_uvs[bedges[0]], edge_uvs[bedges[1]]
                tex = scale2(add2(add2(u0, u1), scale2(uv, 6.0)), 1.0 / 8.0)
            else:
                pos, tex = p, uv
        else:
            faces = vertex_faces[v]
            n = float(len(faces))
            f_avg = scale3(_sum3(face_points[f] for f in faces), 1.0 / n)
            edges = vertex_edges[v]
            r_avg = scale3(_sum3(midpoint(mesh.positions[e.a], mesh.positions[e.b]) for e in edges),
                           1.0 / len(edges))
            pos = scale3(add(add(f_avg, scale3(r_avg, 2.0)), scale3(p, n - 3.0)), 1.0 / n)
            f_uv = scale2(_sum2(face_uvs[f] for f in faces), 1.0 / n)
            tex = scale2(add2(f_uv, scale2(uv, n - 1.0)), 1.0 / n)
        vertex_ids[v] = result.add_vertex(pos, ZERO3, tex)

    edge_ids = {edge: result.add_vertex(edge_points[edge], ZERO3, edge_uvs[edge]) for edge in sorted(adj)}

    for fi, (a, b, c) in enumerate(mesh.triangles):
        fp = result.add_vertex(face_points[fi], ZERO3, face_uvs[fi])
        va, vb, vc = vertex_ids[a], vertex_ids[b], vertex_ids[c]
        ab = edge_ids[Edge.of(a, b)]
        bc = edge_ids[Edge.of(b, c)]
        ca = edge_ids[Edge.of(c, a)]
        result.triangles.extend([
            (va, ab, fp), (va, fp, ca),
            (vb, bc, fp), (vb, fp, ab),
            (vc, ca, fp), (vc, fp, bc),
        ])

    result.recompute_normals()
    return result


def _sum3(vectors) -> Vec3:
    total = ZERO3
    for v in vectors:
        total = add(total, v)
    return total


def _sum2(vectors) -> Vec2:
    total = (0.0, 0.0)
    for v in vectors:
        total = add2(total, v)
    return total


__all__ = ["catmull_clark"]
