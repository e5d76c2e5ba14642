"""Infrastructure adapters (provider client, persistence, storage)."""
