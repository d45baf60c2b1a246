"""Multigroup nodal expansion method solver: input deck reader, node mesh, eigenvalue iteration and command line."""

__version__ = "0.1.0"

__all__ = ["__version__"]