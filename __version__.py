# ============================================================================
# VERSION - PROBE LAB
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# ============================================================================
"""
Version information for Probe Lab.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch.build
# Criteria for 0.2 - probes, control endpoints and resource simulator complete
__version__ = "0.2.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-19"

# Deployment info
IMAGE = f"probelab:v{__version__}"
EPOCH = 1
CODENAME = "Probe Lab"
