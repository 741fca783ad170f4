"""
Numerical constants and tolerances for FX option pricing.

This module defines the day-count, approximation coefficients, bump sizes
and simulation defaults shared by every engine. All values are calibrated
for numerical stability while maintaining accuracy requirements.
"""

# Calendar
DAYS_PER_YEAR = 365.0  # Actual/365; theta and time decay are per calendar day
ONE_DAY = 1.0 / DAYS_PER_YEAR

# Normal distribution (Abramowitz & Stegun 26.2.17, |error| < 7.5e-8)
CDF_SATURATION = 6.0  # Beyond ±6σ, CDF is returned as exactly 0 or 1
AS_P = 0.2316419
AS_B1 = 0.319381530
AS_B2 = -0.356563782
AS_B3 = 1.781477937
AS_B4 = -1.821255978
AS_B5 = 1.330274429

# Greek reporting conventions
PER_ONE_PERCENT = 100.0  # gamma, vega, vanna and volga are quoted per 1% move

# Lattice (American) parameters
DEFAULT_TREE_STEPS = 200
MIN_TREE_STEPS = 2
MAX_TREE_STEPS = 1000  # Above this the O(n²) induction gets slow
LATTICE_VOL_BUMP = 0.0001  # 1 basis point of volatility
LATTICE_RATE_BUMP = 0.01  # 1% rate shift for rho
LATTICE_SPOT_BUMP = 0.00001  # 0.001% relative spot bump (degenerate lattices only)

# Monte Carlo (Asian) parameters
DEFAULT_MC_PATHS = 50_000
MC_BATCH_SIZE = 10_000  # Paths simulated per batch; bounds memory per batch
CONFIDENCE_Z = 1.96  # Two-sided 95% normal quantile

# Input policy limits (caller-side validation)
MAX_VOLATILITY = 2.0  # 200% annualized
MIN_MC_PATHS = 2  # Sample variance needs at least two paths

# Diagnostics tolerances
ARBITRAGE_TOLERANCE = 1e-4  # Tolerance for bounds and dominance checks
PARITY_TOLERANCE = 1e-9  # Put-call parity and digital sum tolerance
