"""Domain layer: entities, exceptions and role store services."""
