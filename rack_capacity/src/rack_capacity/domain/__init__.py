"""Domain layer: facility entities, 4D vocabulary and planning services."""
