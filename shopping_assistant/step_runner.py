from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger("shopping_assistant.steps")

ContextT = TypeVar("ContextT")


@dataclass
class PipelineStep(Generic[ContextT]):
    """Named async step for the pipeline runner."""
    name: str
    fn: Callable[[ContextT], Awaitable[None]]
    skip_if: Optional[Callable[[ContextT], bool]] = None


class StepRunner(Generic[ContextT]):
    """Runs async steps in order over a shared mutable context."""

    def __init__(self, steps: List[PipelineStep[ContextT]]) -> None:
        """Purpose: Initialize the runner with an ordered list of steps.
        Inputs/Outputs: Input is a list of PipelineStep; no return value.
        Side Effects / State: Stores the step list for later execution.
        Dependencies: None beyond PipelineStep definitions.
        Failure Modes: Raises ValueError on duplicate step names.
        If Removed: Pipeline steps are never executed and requests return nothing.
        Testing Notes: Provide a minimal step list and ensure order is preserved.
        """
        # Keep the step order; names must be unique so logs stay unambiguous.
        names = [step.name for step in steps]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate pipeline step names: {names}")
        self._steps = steps

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    async def run(self, context: ContextT, request_id: str = "-") -> None:
        """Purpose: Await each step in order, honoring skip_if guards.
        Inputs/Outputs: Inputs are a mutable context and a request id for logs; no return.
        Side Effects / State: Steps mutate the context; timings are logged at debug level.
        Dependencies: PipelineStep.fn and PipelineStep.skip_if.
        Failure Modes: Exceptions in step functions propagate to the caller.
        If Removed: The aggregation pipeline cannot run.
        Testing Notes: Verify skip_if logic and ordering with simple steps.
        """
        # Run steps sequentially; the fan-out concurrency lives inside a single step.
        for step in self._steps:
            if step.skip_if and step.skip_if(context):
                logger.debug("request=%s step=%s status=skipped", request_id, step.name)
                continue
            started = time.perf_counter()
            await step.fn(context)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug("request=%s step=%s status=success took_ms=%.1f", request_id, step.name, elapsed_ms)
