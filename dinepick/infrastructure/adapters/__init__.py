"""Infrastructure adapters for external systems (database, queue, webhooks)."""
