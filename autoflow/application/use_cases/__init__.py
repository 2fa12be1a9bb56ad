"""Application use cases: workflow engine and event ingestion."""
