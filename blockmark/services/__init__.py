"""Service layer binding configuration, storage and output plugins."""
