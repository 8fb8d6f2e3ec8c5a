"""Offline analysis of recorded run trajectories."""
