"""Prometheus exporter for YouLess LS-120 energy meter readers."""
