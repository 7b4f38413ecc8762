"""Personal-finance question answering package."""

from .config import PipelineConfig
from .pipeline.orchestrator import RetrievalOrchestrator

__all__ = ["PipelineConfig", "RetrievalOrchestrator"]
