"""Core layout built from cell templates, and the node mesh derived from it."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .common import END_MARK, LEFT, RIGHT, BoundaryType
from .node import Node

_log = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_OFFSETS = ((1, 0, 0), (0, 1, 0), (0, 0, 1))
_DIR_NAMES = ("X", "Y", "Z")
_SIDE_NAMES = ("Left", "Right")


def _parse_int(token):
    """Read the leading integer of a token, ignoring anything after it."""
    match = _INT_PREFIX.match(token)
    if match is None:
        raise ValueError(f"invalid integer {token!r}")
    return int(match.group(1))


def _block_lines(stream):
    """Yield raw lines up to the one holding the end mark."""
    while (line := stream.read_line()) is not None:
        if END_MARK in line:
            return
        yield line


def _check_shape(cell, depth, rows, cols, cell_id):
    if len(cell) != depth or any(
        len(plane) != rows or any(len(row) != cols for row in plane) for plane in cell
    ):
        raise ValueError(
            f"cell {cell_id} does not have the shape {depth}x{rows}x{cols} of the first cell"
        )


class Geometry:
    """Cell templates, the assembled region map indexed [z][y][x] and the nodes."""

    def __init__(self, solver):
        self.solver = solver
        self.cel_id = 0
        self.cell = []
        self.cells = {}
        self.structure = []
        self.nodes = {}

    def read(self, stream):
        """Read a Geometry block holding CEL and Structure sections."""
        _log.info("Read Geometry....")
        stream.skip_char()
        while not stream.at_end():
            token = stream.next_token()
            if token == "CEL":
                self.read_cell(stream)
            elif token == "Structure":
                self.read_structure(stream)
            elif token == END_MARK:
                break

    def read_cell(self, stream):
        """Read one cell template; blank lines separate its axial layers."""
        _log.info("Read Cell....")
        self.cel_id = stream.next_int()
        stream.skip_char()
        cell = []
        layer = []
        for line in _block_lines(stream):
            if not line:
                if layer:
                    cell.append(layer)
                    layer = []
                continue
            row = []
            for token in line.split():
                if token == ".":
                    row.append(-1)
                elif token == "0":
                    row.append(0)
                else:
                    try:
                        row.append(_parse_int(token))
                    except ValueError:
                        _log.warning("Warning: invalid token in CEL block: %s", token)
            if row:
                layer.append(row)
        if layer:
            cell.append(layer)
        self.cell = cell
        self.cells[self.cel_id] = cell

    def read_structure(self, stream):
        """Assemble the region map from cell ids and create a node for every fuel cell."""
        _log.info("Read Structure....")
        stream.skip_char()
        blocks = []
        current = []
        for line in _block_lines(stream):
            if not line:
                if current:
                    blocks.append(current)
                    current = []
                continue
            current.append(line)
        if current:
            blocks.append(current)

        if not self.cells:
            raise ValueError("no CEL block is defined before the Structure block")
        first_id = min(self.cells)
        sample = self.cells[first_id]
        if not sample or not sample[0] or not sample[0][0]:
            raise ValueError(f"cell {first_id} is empty")
        depth, rows, cols = len(sample), len(sample[0]), len(sample[0][0])

        structure = [[] for _ in range(len(blocks) * depth)]
        self.structure = structure
        nodes = {}

        for z, block in enumerate(blocks):
            for y, line in enumerate(block):
                x = 0
                for token in line.split():
                    cell_id = _parse_int(token)
                    template = self.cells.get(cell_id)
                    if template is None:
                        continue
                    _check_shape(template, depth, rows, cols, cell_id)
                    self._place(structure, template, x, y, z, depth, rows, cols)
                    for k, plane in enumerate(template):
                        for i, cell_row in enumerate(plane):
                            for j, value in enumerate(cell_row):
                                if value in (-1, 0):
                                    continue
                                key = (x * cols + j, y * rows + i, z * depth + k)
                                nodes[key] = Node(value, self.solver)
                    x += 1

        self.nodes = dict(sorted(nodes.items()))
        for x, y, z in self.nodes:
            self.set_neighbors(x, y, z)
        for (x, y, z), node in self.nodes.items():
            node.set_boundary(x, y, z)
        for node in self.nodes.values():
            node.set_incoming_current()

    @staticmethod
    def _place(structure, template, x, y, z, depth, rows, cols):
        start = x * cols
        for k, plane in enumerate(template):
            layer = structure[z * depth + k]
            for i, cell_row in enumerate(plane):
                gy = y * rows + i
                if len(layer) <= gy:
                    layer.extend([] for _ in range(gy + 1 - len(layer)))
                row = layer[gy]
                if len(row) < start + cols:
                    row.extend([0] * (start + cols - len(row)))
                row[start:start + cols] = cell_row

    def set_neighbors(self, x, y, z):
        """Link the node at (x, y, z) to the nodes next to it along each direction."""
        node = self.nodes.get((x, y, z))
        if node is None:
            return
        for u, (dx, dy, dz) in enumerate(_OFFSETS[: self.solver.dim]):
            node.neighbors[u][LEFT] = self.nodes.get((x - dx, y - dy, z - dz))
            node.neighbors[u][RIGHT] = self.nodes.get((x + dx, y + dy, z + dz))

    def format_structure(self):
        """Return the region map as text, one block per axial layer."""
        parts = ["\n[STRUCTURE]\n"]
        for z, layer in enumerate(self.structure):
            parts.append(f"Layer z = {z}\n")
            for row in layer:
                parts.append(
                    "".join("    " if value in (-1, 0) else f"{value:>3} " for value in row)
                    + "\n"
                )
            parts.append("----\n")
        return "".join(parts)

    def write_structure(self, path):
        """Write the region map report to a file."""
        Path(path).write_text(self.format_structure(), encoding="utf-8")

    def _node(self, x, y, z):
        node = self.nodes.get((x, y, z))
        if node is None:
            raise KeyError(f"Node ({x}, {y}, {z}) not found.")
        return node

    def node_neighbors(self, x, y, z):
        """Return a report of the regions next to a node."""
        node = self._node(x, y, z)
        parts = [f"Neighbors of ({x},{y},{z}):\n"]
        for d in range(self.solver.dim):
            parts.append(f"  Direction {d}:\n")
            for s in (LEFT, RIGHT):
                neighbor = node.neighbors[d][s]
                if neighbor is not None:
                    parts.append(f"    Side {s} REGION = {neighbor.region}\n")
                else:
                    parts.append(f"    Side {s} (null)\n")
        return "".join(parts)

    def node_info(self, x, y, z):
        """Return a detailed report of one node's state."""
        node = self._node(x, y, z)
        dim = self.solver.dim

        def sci(values):
            return "".join(f"{value:.5e} " for value in values)

        parts = [
            f"===== Node ({x}, {y}, {z}) =====\n",
            f"REGION: {node.region}\n",
            "WIDTH: " + "".join(f"{w:g} " for w in node.width) + "\n",
            "FLUX: " + sci(node.flux) + "\n",
            "D: " + sci(node.diffusion) + "\n",
            "BETA: " + "".join(sci(row) for row in node.beta) + "\n",
        ]
        for d in range(dim):
            for s in (LEFT, RIGHT):
                kind = "VACUUM" if node.boundary[d][s] is BoundaryType.VACUUM else "REFLECTIVE"
                neighbor = node.neighbors[d][s]
                tail = (
                    f", Neighbor REGION: {neighbor.region}"
                    if neighbor is not None
                    else ", No neighbor"
                )
                parts.append(f"[Boundary] {_DIR_NAMES[d]}-{_SIDE_NAMES[s]} | {kind}{tail}\n")
        parts.append("A Matrix:\n")
        parts.extend(sci(row) + "\n" for row in node.a)
        for title, blocks in (
            ("Q Matrix:", node.q),
            ("C Matrix:", node.c),
            ("out_current:", node.out_current),
            ("incom_current:", node.incoming_current),
        ):
            parts.append(title + "\n")
            for block in blocks:
                parts.extend(sci(row) + "\n" for row in block)
                parts.append("\n")
        return "".join(parts)

    def total_node_count(self):
        """Count the cells that carry a material region."""
        return sum(value > 0 for layer in self.structure for row in layer for value in row)