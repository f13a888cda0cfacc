"""File and export helpers."""
