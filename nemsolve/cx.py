"""Macroscopic cross-section tables, one row per material region."""

from __future__ import annotations

import logging

from .common import END_MARK

_log = logging.getLogger(__name__)

# Keyword in the input file -> attribute holding that table.
_INPUT_TABLES = {
    "DIFFUSION": "diffusion",
    "REMOVAL": "removal",
    "SCATTER": "scattering",
    "FISSION": "fission",
    "CHI": "chi",
}

# Section title in the printed report -> attribute.
_SECTIONS = (
    ("DIFFUSION", "diffusion"),
    ("REMOVAL", "removal"),
    ("SCATTERING", "scattering"),
    ("FISSION", "fission"),
    ("CHI", "chi"),
)


class CrossSections:
    """Diffusion, removal, scattering, fission and fission spectrum per region and group."""

    def __init__(self, groups):
        self.groups = groups
        self.regions = 0
        self.diffusion = []
        self.removal = []
        self.scattering = []
        self.fission = []
        self.chi = []

    def _allocate(self, regions):
        if regions < 0:
            raise ValueError(f"region count must not be negative, got {regions}")
        self.regions = regions
        for _, name in _SECTIONS:
            setattr(self, name, [[0.0] * self.groups for _ in range(regions)])

    def read(self, stream):
        """Read a CX block: region count and one table per group, up to the end mark."""
        _log.info("Read CX....")
        stream.skip_char()
        while not stream.at_end():
            token = stream.next_token()
            if token == "REGION_NUM":
                self._allocate(stream.next_int())
            elif token == "GROUP":
                self.read_table(stream, stream.next_int() - 1)
            elif token == END_MARK:
                break

    def read_table(self, stream, group_index):
        """Read the values of one energy group (zero based) for every region."""
        if not 0 <= group_index < self.groups:
            raise ValueError(
                f"group {group_index + 1} is outside 1..{self.groups}"
            )
        _log.info("Read CXTable....")
        stream.skip_char()
        while True:
            token = stream.next_token()
            if token == END_MARK:
                return
            name = _INPUT_TABLES.get(token)
            if name is None:
                continue
            for row in getattr(self, name):
                row[group_index] = stream.next_float()

    def region(self, region):
        """Return (diffusion, removal, scattering, fission, chi) for a one-based region."""
        if not 1 <= region <= self.regions:
            raise ValueError(f"region {region} is not defined (1..{self.regions})")
        index = region - 1
        return (
            self.diffusion[index],
            self.removal[index],
            self.scattering[index],
            self.fission[index],
            self.chi[index],
        )

    def set_coefficients(self, nodes):
        """Hand every node the cross sections of its region."""
        for node in nodes:
            node.set_cross_section(*self.region(node.region))

    def format(self):
        """Return the tables as a printable report."""
        parts = [f"\n[CX]\nRegion : {self.regions}\nGroup : {self.groups}\n"]
        for title, name in _SECTIONS:
            parts.append(f"\n[{title}]\n\n")
            for row in getattr(self, name):
                parts.append("".join(f"{value:.2e} " for value in row) + "\n")
            parts.append("\n")
        return "".join(parts)