"""Application-wide constants.

Energies in GeV, momenta in GeV/c, lengths in fm.
"""

# Rejection sampling
MAX_REJECTION_ITERATIONS = 1000
SMALL_NUMBER = 1e-6

# Max-xsec estimator design constants
MAX_XSEC_GRID_POINTS_THETA = 10
MAX_XSEC_GRID_POINTS_PHI = 10
MAX_XSEC_SEARCH_LAYERS = 100
ACCEPTABLE_FRACTION_OF_SAFETY_FACTOR = 0.2

# Generator configuration defaults
DEFAULT_SAFETY_FACTOR = 1.6
DEFAULT_CACHE_MIN_ENERGY_GEV = 1.0
DEFAULT_MAX_XSEC_DIFF_TOLERANCE = 999999.0
DEFAULT_MIN_ANGLE_EM_DEG = 0.0
DEFAULT_MAX_XSEC_NUCLEON_THROWS = 800

# Minimum Q2 cut applied to the physical Q2 range [GeV^2]
Q2_MIN_CUT = 1e-10

# Cache branches need this many points before interpolation is trusted
CACHE_MIN_SPLINE_POINTS = 4

# Known identifiers for the composition step
NUCLEAR_MODEL_IDS = ["FermiGas", "LocalFermiGas"]
PAULI_BLOCKER_IDS = ["Default", "LocalFermiGas"]
