"""Workflow orchestration for the scheduled research jobs.

Usage::

    from src.storage import MemoryCache, build_store, build_daily_run_ledger
    from src.workflows import EveningCatchupWorkflow
    store = build_store(MemoryCache())
    result = EveningCatchupWorkflow(build_daily_run_ledger(store)).run()
"""

from src.workflows.base import BaseWorkflow, WorkflowResult
from src.workflows.evening import EveningCatchupWorkflow
from src.workflows.morning import MorningDigestWorkflow
from src.workflows.status import classify_status, get_system_status, verify_cron_secret

__all__ = [
    "BaseWorkflow",
    "WorkflowResult",
    "MorningDigestWorkflow",
    "EveningCatchupWorkflow",
    "get_system_status",
    "classify_status",
    "verify_cron_secret",
]
