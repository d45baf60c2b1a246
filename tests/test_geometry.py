from types import SimpleNamespace

import pytest

from nemsolve.common import LEFT, RIGHT, BoundaryType, TokenStream
from nemsolve.geometry import Geometry


def make_geometry(dim=2, groups=1):
    solver = SimpleNamespace(
        dim=dim,
        groups=groups,
        width=[10.0] * dim,
        albedo=[[0.0, 0.0] for _ in range(dim)],
        k_eff=1.0,
    )
    geometry = Geometry(solver)
    solver.geometry = geometry
    return geometry


def block(cells, structure):
    parts = ["(\n"]
    for cell_id, body in cells.items():
        parts.append(f"CEL {cell_id} (\n{body}\n);\n")
    parts.append(f"Structure (\n{structure}\n);\n);\n")
    return TokenStream("".join(parts))


def test_read_cell_maps_dot_and_zero():
    geometry = make_geometry()
    geometry.read(block({1: "1 .\n0 2"}, "1"))
    assert geometry.cells[1] == [[[1, -1], [0, 2]]]


def test_read_cell_blank_line_separates_layers():
    geometry = make_geometry(dim=3)
    geometry.read(block({1: "1\n\n2"}, "1"))
    assert geometry.cells[1] == [[[1]], [[2]]]
    assert geometry.structure == [[[1]], [[2]]]


def test_read_cell_skips_invalid_token():
    geometry = make_geometry()
    geometry.read(block({1: "1 x 3"}, "1"))
    assert geometry.cells[1] == [[[1, 3]]]


def test_structure_tiles_cells():
    geometry = make_geometry()
    geometry.read(block({1: "1 1"}, "1 1\n1 1"))
    assert geometry.structure == [[[1, 1, 1, 1], [1, 1, 1, 1]]]
    assert len(geometry.nodes) == 8
    assert geometry.total_node_count() == len(geometry.nodes)


def test_unknown_cell_id_is_skipped():
    geometry = make_geometry()
    geometry.read(block({1: "1", 2: "2"}, "1 7 2"))
    assert geometry.structure == [[[1, 2]]]


def test_axial_blocks_stack_layers():
    geometry = make_geometry(dim=3)
    geometry.read(block({1: "1\n\n1"}, "1\n\n1"))
    assert len(geometry.structure) == 4
    assert geometry.total_node_count() == 4
    assert sorted(geometry.nodes) == [(0, 0, z) for z in range(4)]


def test_neighbors_are_linked():
    geometry = make_geometry()
    geometry.read(block({1: "1 2"}, "1\n1"))
    node = geometry.nodes[(0, 0, 0)]
    assert node.neighbors[0][LEFT] is None
    assert node.neighbors[0][RIGHT] is geometry.nodes[(1, 0, 0)]
    assert node.neighbors[1][RIGHT] is geometry.nodes[(0, 1, 0)]
    assert node.neighbors[0][RIGHT].region == 2


def test_zero_cell_gives_vacuum_boundary():
    geometry = make_geometry(dim=1)
    geometry.read(block({1: ". 1 0"}, "1"))
    node = geometry.nodes[(1, 0, 0)]
    assert node.boundary[0][LEFT] is BoundaryType.REFLECTIVE
    assert node.boundary[0][RIGHT] is BoundaryType.VACUUM
    assert node.incoming_current[0][RIGHT] == [0.0]
    assert len(geometry.nodes) == 1


def test_format_structure_layout():
    geometry = make_geometry(dim=1)
    geometry.read(block({1: "1 . 0"}, "1"))
    expected = "\n[STRUCTURE]\nLayer z = 0\n" + "  1 " + "    " * 2 + "\n----\n"
    assert geometry.format_structure() == expected


def test_write_structure_matches_format(tmp_path):
    geometry = make_geometry()
    geometry.read(block({1: "1 2"}, "1\n1"))
    path = tmp_path / "structure.txt"
    geometry.write_structure(path)
    assert path.read_text(encoding="utf-8") == geometry.format_structure()


def test_node_neighbors_report():
    geometry = make_geometry()
    geometry.read(block({1: "1 2"}, "1"))
    report = geometry.node_neighbors(0, 0, 0)
    assert report.startswith("Neighbors of (0,0,0):\n")
    assert "    Side 1 REGION = 2\n" in report
    assert "    Side 0 (null)\n" in report


def test_node_info_report():
    geometry = make_geometry()
    geometry.read(block({1: "1 0"}, "1"))
    report = geometry.node_info(0, 0, 0)
    assert "REGION: 1\n" in report
    assert "WIDTH: 10 10 \n" in report
    assert "[Boundary] X-Right | VACUUM, No neighbor\n" in report


def test_missing_node_raises():
    geometry = make_geometry()
    geometry.read(block({1: "1"}, "1"))
    with pytest.raises(KeyError):
        geometry.node_info(5, 5, 5)
    with pytest.raises(KeyError):
        geometry.node_neighbors(5, 5, 5)


def test_structure_without_cells_raises():
    geometry = make_geometry()
    with pytest.raises(ValueError):
        geometry.read(TokenStream("(\nStructure (\n1\n);\n);\n"))


def test_structure_with_bad_token_raises():
    geometry = make_geometry()
    with pytest.raises(ValueError):
        geometry.read(block({1: "1"}, "1 ."))