"""Abstract base class for the scheduled research jobs."""

from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from src.core.config import get_config
from src.core.exceptions import WorkflowError
from src.core.logger import bind_job_context, get_logger

T = TypeVar("T")


@dataclass
class WorkflowResult:
    """Result of one job execution.

    Attributes:
        job_type: Identifier for the job (``morning-digest``, ``evening-catchup``).
        success: Whether the job met its goal (morning: digest sent).
        timestamp: When the job finished (UTC).
        queries_processed: Findings carried into the email.
        urgent_items_found: Urgent items reported by this run.
        email_sent: Whether an email went out.
        elapsed_sec: Total execution time in seconds.
        errors: Human-readable error messages, in order of occurrence.
        data: Arbitrary extra result data.
    """

    job_type: str
    success: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    queries_processed: int = 0
    urgent_items_found: int = 0
    email_sent: bool = False
    elapsed_sec: float = 0.0
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly camelCase view used by the CLI."""
        return {
            "success": self.success,
            "jobType": self.job_type,
            "timestamp": self.timestamp.isoformat(),
            "queriesProcessed": self.queries_processed,
            "urgentItemsFound": self.urgent_items_found,
            "emailSent": self.email_sent,
            "elapsedSec": self.elapsed_sec,
            "errors": self.errors,
        }


class BaseWorkflow(ABC):
    """Base class for job orchestrators.

    Provides step execution with timing, logging and error handling.
    Critical steps abort the job; non-critical steps record an error
    string and let the job continue.
    """

    name: str = "base-workflow"
    max_duration_sec: float | None = None

    def __init__(self) -> None:
        self._config = get_config()
        self._logger = get_logger(type(self).__name__)
        self._errors: list[str] = []

    @abstractmethod
    def execute(self) -> WorkflowResult:
        """Execute the job steps using ``_run_step()``.

        Returns:
            WorkflowResult with collected metrics.
        """

    def run(self) -> WorkflowResult:
        """Run the job with timing and top-level error handling.

        Returns:
            WorkflowResult; never raises.
        """
        self._errors = []
        bind_job_context(self.name, uuid.uuid4().hex[:12])
        self._logger.info("workflow_started", workflow=self.name)
        start = time.monotonic()

        try:
            result = self.execute()
        except WorkflowError as e:
            result = self._failed_result(start)
            self._logger.error(
                "workflow_aborted",
                workflow=self.name,
                error=str(e),
                elapsed_sec=result.elapsed_sec,
            )
            return result
        except Exception as e:
            self._errors.append(f"Fatal error: {e}")
            result = self._failed_result(start)
            self._logger.error(
                "workflow_unexpected_error",
                workflow=self.name,
                error=str(e),
                error_type=type(e).__name__,
                elapsed_sec=result.elapsed_sec,
            )
            return result

        result.elapsed_sec = round(time.monotonic() - start, 2)
        result.timestamp = datetime.now(timezone.utc)
        result.errors = self._errors

        self._logger.info(
            "workflow_completed",
            workflow=self.name,
            success=result.success,
            elapsed_sec=result.elapsed_sec,
            queries=result.queries_processed,
            urgent_items=result.urgent_items_found,
            email_sent=result.email_sent,
            error_count=len(result.errors),
        )
        self._check_budget(result.elapsed_sec)
        return result

    def _failed_result(self, start: float) -> WorkflowResult:
        return WorkflowResult(
            job_type=self.name,
            success=False,
            elapsed_sec=round(time.monotonic() - start, 2),
            errors=self._errors,
        )

    def _check_budget(self, elapsed_sec: float) -> None:
        if self.max_duration_sec is not None and elapsed_sec > self.max_duration_sec:
            self._logger.warning(
                "workflow_over_budget",
                workflow=self.name,
                elapsed_sec=elapsed_sec,
                max_duration_sec=self.max_duration_sec,
            )

    def _record_error(self, message: str) -> None:
        """Record a non-fatal error without a step failure."""
        self._errors.append(message)

    def _run_step(
        self,
        step_name: str,
        step_fn: Callable[[], T],
        critical: bool = False,
    ) -> T | None:
        """Execute a single step with logging and error handling.

        Args:
            step_name: Human-readable name for the step.
            step_fn: Callable that performs the step work.
            critical: If True, raise WorkflowError on failure to abort
                the job. If False, record the error and return None.

        Returns:
            The step function's return value, or None on non-critical failure.

        Raises:
            WorkflowError: If the step fails and ``critical`` is True.
        """
        self._logger.info("step_started", workflow=self.name, step=step_name)
        start = time.monotonic()

        try:
            result = step_fn()
        except Exception as e:
            elapsed = round(time.monotonic() - start, 2)
            self._errors.append(f"{step_name} failed: {e}")

            if critical:
                self._logger.error(
                    "critical_step_failed",
                    workflow=self.name,
                    step=step_name,
                    error=str(e),
                    elapsed_sec=elapsed,
                )
                raise WorkflowError(
                    f"Critical step '{step_name}' failed: {e}",
                    {"step": step_name, "original_error": str(e)},
                ) from e

            self._logger.warning(
                "step_failed",
                workflow=self.name,
                step=step_name,
                error=str(e),
                elapsed_sec=elapsed,
            )
            return None

        self._logger.info(
            "step_completed",
            workflow=self.name,
            step=step_name,
            elapsed_sec=round(time.monotonic() - start, 2),
        )
        return result
