"""Command-line interface for zoomtiler."""
