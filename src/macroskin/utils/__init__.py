"""Utility helpers for macroskin."""
