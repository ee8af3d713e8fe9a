import numpy as np

pi = float(np.pi)
twopi = 2.0 * pi
mu0 = 4e-7 * pi  # vacuum permeability [H/m]

# Radial offset added to |r| before evaluating the field (avoids the r=0 singular denominator).
r_eps = 1e-8
# Source/field point coincidence threshold for a single Biot–Savart segment.
coincidence_tol = 1e-10
# Field magnitude below which a trace terminates.
b_min = 1e-15

# Tracing domain in units of the loop radius.
domain_r = 6.0
domain_z = 5.0
