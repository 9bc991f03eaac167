"""Government job notification harvester."""

from .agents.sweep_agent import run_sweep

__all__ = ["run_sweep"]
