"""Application ingestion pipeline."""
from intake.pipeline.ingestion import ApplicationIngestor, IngestionOutcome

__all__ = ["ApplicationIngestor", "IngestionOutcome"]
