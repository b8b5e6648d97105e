"""Readiness scoring engine: Sleep, Recovery and Strain with training load."""
