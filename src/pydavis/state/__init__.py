"""State/store layer.

This package is the single source of truth for how data from HTTP polling,
UDP broadcasts and transferred snapshots is merged into one weather report.
"""
