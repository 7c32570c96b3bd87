"""Shared utilities: configuration, logging, units and data loading."""
