"""Run one harvesting sweep from project root. Use: python run_sweep.py"""
import sys

from gov_job_agent.main import main

sys.exit(main())
