"""Takeoff: event-sourced timeline engine for a turn-based forecasting game."""
