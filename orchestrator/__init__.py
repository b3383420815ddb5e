# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# STATUS: Core - Background repair polling
# PURPOSE: Periodically poll the repair manager for reports
# CREATED: 19 OCT 2026
# ============================================================================
"""
Orchestrator Module

The monitor loop that drives repair polling.

Usage:
    from orchestrator import RepairMonitor

    monitor = RepairMonitor(manager, poll_interval=10.0)
    await monitor.start()  # Starts the loop
"""

from .monitor import RepairMonitor

__all__ = ["RepairMonitor"]
