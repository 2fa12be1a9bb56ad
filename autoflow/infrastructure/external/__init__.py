"""External provider adapters (action executors, webhook normalizers)."""
