"""Business logic services for upld."""

from upld.services.info import render_info
from upld.services.retrieval import Retrieval, RetrievalService, Tier
from upld.services.stats import StatsTracker
from upld.services.upload import UploadResult, UploadService

__all__ = [
    "render_info",
    "Retrieval",
    "RetrievalService",
    "StatsTracker",
    "Tier",
    "UploadResult",
    "UploadService",
]
