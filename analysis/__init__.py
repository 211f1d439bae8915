"""Pure chart-editor package.

This package contains deterministic, testable computations for chart inputs:
dataset normalization, theme and styling resolution, column navigation and
editor state transitions. It must not import Django or perform any I/O.
"""
