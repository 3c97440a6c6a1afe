"""Ledger-driven timekeeping core.

The package is organized by feature modules (ledger, events, schedules,
summaries, health) with a thin Flask controller layer over service and
repository layers.
"""
