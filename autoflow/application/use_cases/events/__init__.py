"""Event use cases: ingestion (validation + dedup) and dispatch to workflows."""

from autoflow.application.use_cases.events.dispatcher import EventDispatcher
from autoflow.application.use_cases.events.ingestor import EventIngestor

__all__ = ["EventDispatcher", "EventIngestor"]
