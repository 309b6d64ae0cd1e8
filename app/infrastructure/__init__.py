"""Infrastructure: persistence and engine services."""
