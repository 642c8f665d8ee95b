# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core module initialization
# PURPOSE: Export errors; config and logging are imported from submodules
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.errors import (
    ProbeLabError,
    DuplicateIndicatorNameError,
    RegistryFrozenError,
    InvalidParameterError,
    IndicatorCheckFailure,
)

__all__ = [
    "ProbeLabError",
    "DuplicateIndicatorNameError",
    "RegistryFrozenError",
    "InvalidParameterError",
    "IndicatorCheckFailure",
]
