# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for Probe Lab.
"""

from core.config.defaults import (
    IndicatorDefaults,
    AvailabilityDefaults,
    ResourceDefaults,
    ServerDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "IndicatorDefaults",
    "AvailabilityDefaults",
    "ResourceDefaults",
    "ServerDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
