"""Domain layer: entities, event kinds and error taxonomy."""
