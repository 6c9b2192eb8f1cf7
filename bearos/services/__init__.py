"""Table registry, serialization and pub/sub services."""
