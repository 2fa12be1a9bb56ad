"""Infrastructure layer: persistence, cache, security, provider adapters."""
