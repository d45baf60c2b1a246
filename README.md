# nemsolve

`nemsolve` solves the multigroup neutron diffusion eigenvalue problem on a
structured grid of nodes with the nodal expansion method (NEM). It reads a
plain-text input deck describing the problem conditions, the cross sections of
each material region and the core layout, iterates the nodal equations until
the node fluxes converge, and reports the effective multiplication factor
(k-effective).

The package has no dependencies outside the Python standard library
(Python 3.10 or later).

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Command line

```
nemsolve [input] [-o OUTPUT_DIR]
```

* `input` – the input deck. When it is left out, the command asks for it
  with `Input file name: `.
* `-o`, `--output-dir` – directory for the output files (default: the
  current directory; it is created if missing).

The command reads the deck, writes the expanded core layout to
`structure.txt` in the output directory, runs the calculation and logs the
progress of each outer iteration to standard output:

```
Iteration 1: K_EFF = ..., Error = ...
...
Converged after N iterations.  K_EFF: ...  Error: ...
```

Iteration stops once the largest relative change of any node flux falls below
`1e-6`. The converged node fluxes are then written to one file per energy
group, `flux_group_1.txt`, `flux_group_2.txt`, ..., laid out layer by layer
(`Z = 0`, `Z = 1`, ...) in the same shape as the core map, values in
scientific notation separated by tabs. Finally the processor time spent on the
calculation is printed, for example `0.125 sec`.

If the input file cannot be opened, the command prints
`Error: Cannot open the input file.` to standard error and exits with
status 1.

## Input format

An input deck is a sequence of blocks. Each block starts with a keyword
followed by an opening `(` and ends with `);`.

```
Title (
  Two-group sample core
);

Condition (
  DIM 2
  GROUP_NUM 2
  WIDTH 10.0 10.0
  ALBEDO 0.0 0.0 0.0 0.0
);

CX (
  REGION_NUM 2
  GROUP 1 (
    DIFFUSION 1.43 1.43
    REMOVAL   0.0259 0.0262
    SCATTER   0.0175 0.0175
    FISSION   0.0062 0.0058
    CHI       1.0 1.0
  );
  GROUP 2 (
    DIFFUSION 0.37 0.37
    REMOVAL   0.0935 0.0980
    SCATTER   0.0 0.0
    FISSION   0.1091 0.1045
    CHI       0.0 0.0
  );
);

Geometry (
  CEL 1 (
1 2
2 1
  );
  Structure (
1 1
1 1
  );
);
```

### Condition

| Keyword     | Meaning                                                         |
|-------------|-----------------------------------------------------------------|
| `DIM`       | number of spatial dimensions (1, 2 or 3)                        |
| `GROUP_NUM` | number of energy groups                                         |
| `WIDTH`     | node width along each dimension, one value per dimension        |
| `ALBEDO`    | left and right albedo for each dimension (`2 * DIM` values)     |

`GROUP_NUM` must appear before the `CX` block and `DIM` before the `Geometry`
block.

### CX

`REGION_NUM` gives the number of material regions. Each `GROUP g ( ... );`
sub-block lists, for energy group `g` (counted from 1), one value per region
for `DIFFUSION`, `REMOVAL`, `SCATTER`, `FISSION` and `CHI`. Regions are
numbered from 1 in the geometry. A group number outside `1..GROUP_NUM`, or a
node whose region is not defined, raises `ValueError`.

### Geometry

A `CEL id ( ... );` block defines a reusable cell template. Each line is a row
of tokens; blank lines separate axial layers. A token is

* a region number (1 or greater): a node made of that material,
* `0`: empty space; a node face next to it is a vacuum boundary,
* `.`: empty space; a node face next to it is a reflective boundary.

The `Structure ( ... );` block arranges cells into the core: each token is a
cell id, each line is a row of cells, and blank lines separate axial layers of
cells. Tokens naming an undefined cell are skipped. Every cell is expanded in
place, so the final node grid is the structure map scaled by the cell template
size. All cells must have the shape of the cell with the lowest id, otherwise
`ValueError` is raised.

Faces of nodes on the edge of the grid are reflective. On a reflective face
the incoming current is the outgoing current scaled by
`(1 - 2a) / (1 + 2a)`, where `a` is the albedo for that face from the
`Condition` block; on a vacuum face it is zero.

## Library use

```python
from nemsolve.solver import Solver

solver = Solver()
solver.read_input("core.inp")          # or solver.read_text(deck_text)
for iteration, k_eff, error in solver.iterate(tolerance=1e-6):
    print(iteration, k_eff, error)
paths = solver.write_flux_files("out")  # list of written paths
```

* `Solver.run(output_dir=".")` iterates to convergence, writes the flux files
  and returns k-effective.
* `Solver.print_structure(path="structure.txt")` writes the layout report.
* `solver.geometry` (`nemsolve.geometry.Geometry`) holds the region map in
  `structure` (indexed `[z][y][x]`) and the nodes in `nodes`, keyed by
  `(x, y, z)`. `format_structure()`, `node_info(x, y, z)` and
  `node_neighbors(x, y, z)` return text reports (the latter two raise
  `KeyError` for a missing node); `total_node_count()` counts material cells.
* `solver.cx` (`nemsolve.cx.CrossSections`) holds the cross-section tables;
  `format()` returns them as a report.
* `nemsolve.node.solve_linear(matrix, rhs)` solves a small dense system by
  LU elimination without pivoting.

## Limitations

* Output is plain text only; there is no plotting or visualisation of the
  flux maps.
* The calculation runs in a single thread.
* Nodes of one problem all share the widths given in the `Condition` block.