"""Ingestion module - video upload, probing, remuxing and storage."""
from src.ingest.pipeline import IngestionResult, VideoIngestionService, VideoUpload
from src.ingest.prober import MediaProber
from src.ingest.remuxer import FastStartRemuxer
from src.ingest.toolkit import MediaToolkit, SubprocessToolkit

__all__ = [
    "VideoIngestionService",
    "VideoUpload",
    "IngestionResult",
    "MediaProber",
    "FastStartRemuxer",
    "MediaToolkit",
    "SubprocessToolkit",
]
