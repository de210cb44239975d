"""Utility helpers for learnpath."""
