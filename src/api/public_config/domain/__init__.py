"""Domain layer of the Public Config bounded context."""
