"""Input reading and the outer iteration of the nodal expansion solver."""

from __future__ import annotations

import logging
import math
from pathlib import Path

from .common import END_MARK, TokenStream
from .cx import CrossSections
from .geometry import Geometry

_log = logging.getLogger(__name__)

CONVERGENCE = 1e-6


class Solver:
    """Problem conditions, cross sections, geometry and the eigenvalue iteration."""

    def __init__(self):
        self.dim = 0
        self.groups = 0
        self.width = []
        self.albedo = []
        self.k_eff = 1.0
        self.title = []
        self.iterations = 0
        self.error = 0.0
        self.cx = CrossSections(0)
        self.geometry = Geometry(self)

    def read_input(self, path):
        """Read an input file."""
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
        self.read_text(text)

    def read_text(self, text):
        """Read every block of an input deck and hand the nodes their cross sections."""
        stream = TokenStream(text)
        while not stream.at_end():
            token = stream.next_token()
            if token == "Title":
                self.read_title(stream)
            elif token == "Condition":
                self.read_condition(stream)
            elif token == "CX":
                self.cx = CrossSections(self.groups)
                self.cx.read(stream)
            elif token == "Geometry":
                self.geometry.read(stream)
        self.cx.set_coefficients(self.geometry.nodes.values())

    def read_title(self, stream):
        """Read the title lines up to the end mark."""
        stream.skip_char()
        while True:
            token = stream.next_token()
            rest = stream.read_line() or ""
            if token == END_MARK:
                break
            self.title.append(token + rest)
        _log.info("Title: %s", "\n".join(self.title))

    def read_condition(self, stream):
        """Read dimension, group count, node widths and albedos."""
        _log.info("Read Condition....")
        stream.skip_char()
        while True:
            token = stream.next_token()
            if token == "DIM":
                self.dim = stream.next_int()
                self.width = [0.0] * self.dim
            elif token == "GROUP_NUM":
                self.groups = stream.next_int()
            elif token == "WIDTH":
                self.width = [stream.next_float() for _ in range(self.dim)]
            elif token == "ALBEDO":
                self.albedo = [
                    [stream.next_float(), stream.next_float()] for _ in range(self.dim)
                ]
            elif token == END_MARK:
                break

    def iterate(self, tolerance=CONVERGENCE):
        """Run outer iterations, yielding (iteration, k_eff, error) until converged."""
        nodes = list(self.geometry.nodes.values())
        if not nodes:
            raise ValueError("the geometry defines no nodes")
        tables = [self.cx.region(node.region) for node in nodes]
        for node, table in zip(nodes, tables):
            node.set_cross_section(*table)

        iteration = 0
        while True:
            previous = [node.old_flux[:] for node in nodes]
            previous_k = self.k_eff

            for node, (_, removal, scatter, fission, chi) in zip(nodes, tables):
                node.set_incoming_current()
                node.update_a(removal, scatter, fission, chi)
                node.update_transverse_leakage()
                node.make_one_dimensional_flux()
                node.update_average_flux()
                node.update_outgoing_current()

            norm = 0.0
            denom = 0.0
            error = 0.0
            for node, old_values in zip(nodes, previous):
                for new, old in zip(node.flux, old_values):
                    norm += new * new
                    denom += new * old
                    diff = abs(new - old)
                    relative = diff / old if old else (math.inf if diff else 0.0)
                    error = max(error, relative)

            self.k_eff = previous_k * norm / denom
            for node in nodes:
                node.flux[:] = [value / self.k_eff for value in node.flux]

            iteration += 1
            self.iterations = iteration
            self.error = error
            yield iteration, self.k_eff, error
            if error < tolerance:
                return

    def run(self, output_dir="."):
        """Iterate to convergence, write the flux files and return k_eff."""
        _log.info("Solver is running...")
        for iteration, k_eff, error in self.iterate():
            _log.info("Iteration %d: K_EFF = %.5f, Error = %.5e", iteration, k_eff, error)
        _log.info(
            "Converged after %d iterations.  K_EFF: %.5f  Error: %.5e",
            self.iterations,
            self.k_eff,
            self.error,
        )
        self.write_flux_files(output_dir)
        return self.k_eff

    def write_flux_files(self, output_dir="."):
        """Write one flux map per energy group and return the paths written."""
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        nodes = self.geometry.nodes
        paths = []
        for g in range(self.groups):
            parts = []
            for z, layer in enumerate(self.geometry.structure):
                parts.append(f"Z = {z}\n")
                for y, row in enumerate(layer):
                    for x, region in enumerate(row):
                        if region <= 0:
                            parts.append("\t\t\t")
                        else:
                            parts.append(f"{nodes[(x, y, z)].flux[g]:.2e}\t")
                    parts.append("\n")
                parts.append("\n")
            path = directory / f"flux_group_{g + 1}.txt"
            path.write_text("".join(parts), encoding="utf-8")
            paths.append(path)
        return paths

    def print_structure(self, path="structure.txt"):
        """Write the region map report to a file."""
        self.geometry.write_structure(path)