"""
Feature gates driven by tenant configuration.

Controls which derived-data features a tenant takes part in. The checks take
the already-loaded mode or config, so callers stay free of ambient lookups.
"""

from typing import Optional
from matchcore.models.tenant import OperatingMode, RESTRICTED_MODES, TenantConfig


def can_capture_snapshots(mode: OperatingMode) -> bool:
    """
    Check if metric snapshots may be written for a tenant in this mode.

    FIRE_DRILL and DEMO tenants run on rehearsal or seeded data, so their
    numbers must not land in the weekly MQI history.

    Args:
        mode: Tenant operating mode

    Returns:
        bool: True if snapshot capture is allowed
    """
    return OperatingMode(mode) not in RESTRICTED_MODES


def is_network_learning_opted_in(config: Optional[TenantConfig]) -> bool:
    """
    Check if a tenant opted into anonymized cross-tenant learning.

    The boolean column wins; otherwise the legacy JSON form
    {"enabled": true} is honoured. A missing config means not opted in.

    Args:
        config: Tenant configuration row (may be None)

    Returns:
        bool: True if benchmarking against peer medians is allowed
    """
    if config is None:
        return False
    if config.network_learning_opt_in is not None:
        return bool(config.network_learning_opt_in)
    legacy = config.network_learning
    if isinstance(legacy, dict):
        return bool(legacy.get("enabled"))
    return False
