"""Public Config presentation layer."""
