"""A single homogenised node of the nodal expansion method."""

from __future__ import annotations

from .common import LEFT, NU, RIGHT, BoundaryType

_SIDES = (LEFT, RIGHT)


def _filled(rows, cols, value=0.0):
    return [[value] * cols for _ in range(rows)]


def solve_linear(matrix, rhs):
    """Solve matrix @ x = rhs by LU elimination without pivoting."""
    size = len(rhs)
    if len(matrix) != size or any(len(row) != size for row in matrix):
        raise ValueError("matrix must be square and match the right-hand side")
    upper = [[float(value) for value in row] for row in matrix]
    y = [float(value) for value in rhs]

    for i, pivot_row in enumerate(upper):
        pivot = pivot_row[i]
        for j in range(i + 1, size):
            row = upper[j]
            factor = row[i] / pivot
            for k in range(i, size):
                row[k] -= factor * pivot_row[k]
            y[j] -= factor * y[i]

    x = [0.0] * size
    for i in reversed(range(size)):
        acc = y[i]
        for coefficient, known in zip(upper[i][i + 1:], x[i + 1:]):
            acc -= coefficient * known
        x[i] = acc / upper[i][i]
    return x


class Node:
    """One node of the mesh with its fluxes, currents and expansion coefficients.

    The solver supplies ``dim``, ``groups``, ``width`` (per direction),
    ``albedo`` (per direction, left and right), ``k_eff`` and
    ``geometry.structure`` (region numbers indexed [z][y][x]).
    """

    def __init__(self, region, solver):
        self.region = region
        self.solver = solver
        dim = solver.dim
        groups = solver.groups
        self._dim = dim
        self._groups = groups

        self.width = [float(w) for w in solver.width[:dim]]
        self.flux = [1.0] * groups
        self.old_flux = [1.0] * groups
        self.neighbors = [[None, None] for _ in range(dim)]
        self.boundary = [[BoundaryType.REFLECTIVE] * 2 for _ in range(dim)]
        self.diffusion = [0.0] * groups
        self.beta = _filled(dim, groups)
        self.a = _filled(groups, groups)
        self.q = [_filled(4, groups) for _ in range(dim)]
        self.c = [_filled(5, groups) for _ in range(dim)]
        self.out_current = [_filled(2, groups, 1.0) for _ in range(dim)]
        self.incoming_current = [_filled(2, groups, 1.0) for _ in range(dim)]
        self.dl = [_filled(3, groups, 1.0) for _ in range(dim)]
        self.m1 = _filled(dim, groups)
        self.m2 = _filled(dim, groups)
        self.m3 = [_filled(groups, groups) for _ in range(dim)]
        self.m4 = [_filled(groups, groups) for _ in range(dim)]
        self.mm = _filled(groups, groups)
        self.src = [0.0] * groups

    def set_cross_section(self, d, r, s, f, chi):
        """Store the diffusion coefficients and derive the coupling factors."""
        self.diffusion = [float(value) for value in d[: self._groups]]
        for beta_row, w in zip(self.beta, self.width):
            beta_row[:] = [value / w for value in self.diffusion]
        for q, betas in zip(self.q, self.beta):
            for g, b in enumerate(betas):
                q[0][g] = b / (1 + 12 * b)
                q[1][g] = b / ((1 + 12 * b) * (1 + 4 * b))
                q[2][g] = (1 - 48 * b * b) / ((1 + 12 * b) * (1 + 4 * b))
                q[3][g] = b / (1 + 4 * b)

    def update_a(self, r, s, f, chi):
        """Rebuild the group coupling matrix and the moment matrices."""
        inv_k = 1.0 / self.solver.k_eff
        for i, row in enumerate(self.a):
            sign = (-1.0) ** i
            for j in range(self._groups):
                removal = r[i] if i == j else 0.0
                fission = inv_k * chi[i] * f[j] * NU
                row[j] = removal - fission + sign * s[j]

        for m3, m4, betas, w in zip(self.m3, self.m4, self.beta, self.width):
            for j, (row3, row4, a_row) in enumerate(zip(m3, m4, self.a)):
                row3[:] = [value / 10.0 for value in a_row]
                row4[:] = [value / 14.0 for value in a_row]
                row3[j] += 6.0 * betas[j] / w
                row4[j] += 10.0 * betas[j] / w

    def set_incoming_current(self):
        """Take incoming currents from neighbours or from the boundary condition."""
        albedo = self.solver.albedo
        for u in range(self._dim):
            for side in _SIDES:
                incoming = self.incoming_current[u][side]
                neighbor = self.neighbors[u][side]
                if neighbor is not None:
                    incoming[:] = neighbor.out_current[u][1 - side]
                elif self.boundary[u][side] is BoundaryType.REFLECTIVE:
                    alb = albedo[u][side]
                    incoming[:] = [
                        out * (1.0 - 2.0 * alb) / (1.0 + 2.0 * alb)
                        for out in self.out_current[u][side]
                    ]
                else:
                    incoming[:] = [0.0] * self._groups

    def set_boundary(self, x, y, z):
        """Decide the boundary kind of each face from the cell beyond it."""
        structure = self.solver.geometry.structure
        for u in range(self._dim):
            for side in _SIDES:
                coords = [x, y, z]
                if u < len(coords):
                    coords[u] += -1 if side == LEFT else 1
                self.boundary[u][side] = _boundary_at(structure, *coords)

    def surface_net_current(self, dim, side, group):
        """Outgoing minus incoming partial current on a face."""
        return self.out_current[dim][side][group] - self.incoming_current[dim][side][group]

    def surface_flux(self, dim, side, group):
        """Surface flux on a face as the sum of both partial currents."""
        return self.incoming_current[dim][side][group] + self.out_current[dim][side][group]

    def add_product(self, src, c):
        """Return src + A @ c."""
        result = []
        for base, a_row in zip(src, self.a):
            acc = base
            for coefficient, value in zip(a_row, c):
                acc += coefficient * value
            result.append(acc)
        return result

    def _edge_leakage(self, u, side, g, dl0, beta_c):
        neighbor = self.neighbors[u][side]
        if neighbor is not None:
            beta_n = neighbor.beta[u][g]
            dl_n = neighbor.dl[u][0][g]
            return (dl_n * beta_n + dl0 * beta_c) / (beta_n + beta_c)
        if self.boundary[u][side] is BoundaryType.VACUUM:
            return dl0 / 2
        return dl0

    def update_transverse_leakage(self):
        """Compute the average leakage and its first two expansion moments."""
        dim = self._dim
        for u in range(dim):
            moments = self.dl[u]
            for g in range(self._groups):
                dl0 = 0.0
                for i in range(dim):
                    v = (u + i) % dim
                    if v != i:
                        dl0 += (
                            self.surface_net_current(v, RIGHT, g)
                            + self.surface_net_current(v, LEFT, g)
                        ) / self.width[v] / self.diffusion[g]
                moments[0][g] = dl0
                beta_c = self.beta[u][g]
                left = self._edge_leakage(u, LEFT, g, dl0, beta_c)
                right = self._edge_leakage(u, RIGHT, g, dl0, beta_c)
                moments[1][g] = (right - left) / 2.0
                moments[2][g] = (right + left) / 2.0 - dl0

    def make_one_dimensional_flux(self):
        """Compute the expansion coefficients of the one-dimensional fluxes."""
        for u in range(self._dim):
            c = self.c[u]
            for g, phi in enumerate(self.flux):
                flux_l = self.surface_flux(u, LEFT, g)
                flux_r = self.surface_flux(u, RIGHT, g)
                c[0][g] = phi
                c[1][g] = flux_r - flux_l
                c[2][g] = flux_r + flux_l - phi
            src1 = [m * d for m, d in zip(self.dl[u][1], self.diffusion)]
            src2 = [m * d for m, d in zip(self.dl[u][2], self.diffusion)]
            self.m1[u] = self.add_product(src1, c[1])
            self.m2[u] = self.add_product(src2, c[2])
            c[3] = solve_linear(self.m3[u], self.m1[u])
            c[4] = solve_linear(self.m4[u], self.m2[u])

    def update_average_flux(self):
        """Solve the nodal balance for the node-average flux."""
        self.mm = [row[:] for row in self.a]
        self.src = [0.0] * self._groups
        self.old_flux[:] = self.flux

        for u, w in enumerate(self.width):
            for g in range(self._groups):
                self.mm[g][g] += 12.0 * self.q[u][0][g] / w

        for u, w in enumerate(self.width):
            q = self.q[u]
            for g in range(self._groups):
                j_in_l = self.incoming_current[u][LEFT][g]
                j_in_r = self.incoming_current[u][RIGHT][g]
                q4 = 1.0 + 8 * q[1][g] - q[2][g]
                self.src[g] += (2.0 * q[0][g] * self.c[u][4][g] + q4 * (j_in_l + j_in_r)) / w

        self.flux[:] = solve_linear(self.mm, self.src)
        self.old_flux[:] = self.flux

    def update_outgoing_current(self):
        """Update the outgoing partial currents on every face."""
        for u in range(self._dim):
            q = self.q[u]
            c = self.c[u]
            out = self.out_current[u]
            for g, phi in enumerate(self.flux):
                j_in_l = self.incoming_current[u][LEFT][g]
                j_in_r = self.incoming_current[u][RIGHT][g]
                base = q[0][g] * (6 * phi - c[4][g])
                out[RIGHT][g] = base - q[1][g] * j_in_l * 8 + q[2][g] * j_in_r - q[3][g] * c[3][g]
                out[LEFT][g] = base - q[1][g] * j_in_r * 8 + q[2][g] * j_in_l + q[3][g] * c[3][g]


def _boundary_at(structure, x, y, z):
    if 0 <= z < len(structure):
        layer = structure[z]
        if 0 <= y < len(layer):
            row = layer[y]
            if 0 <= x < len(row) and row[x] == 0:
                return BoundaryType.VACUUM
    return BoundaryType.REFLECTIVE