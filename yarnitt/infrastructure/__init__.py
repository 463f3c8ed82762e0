"""Infrastructure layer - databases, event buses, adapters."""
