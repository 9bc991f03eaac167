"""Command-line entry: run one sweep with configured collaborators and print the summary."""

import asyncio
import sys

from gov_job_agent.agents.sweep_agent import run_sweep


def main() -> int:
    summary = asyncio.run(run_sweep())
    print(summary.model_dump_json(by_alias=True, indent=2))
    return 0 if summary.success else 1


if __name__ == "__main__":
    sys.exit(main())
