"""Domain layer: pure types, guard checks, and refresh lifecycle rules."""
