"""Agent exports."""

from .extractor_agent import run_extractor_agent
from .search_agent import run_search_agent
from .sweep_agent import run_sweep

__all__ = ["run_search_agent", "run_extractor_agent", "run_sweep"]
