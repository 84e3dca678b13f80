"""Domain layer: entities, store interfaces, errors and services."""
