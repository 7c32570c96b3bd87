"""Plots of staging results."""
