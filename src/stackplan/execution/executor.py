"""Executor: apply a plan against a provider in dependency order."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional
from ..model.resources import ESCAPED_REFERENCE, REFERENCE_PATTERN
from ..planning.models import ActionType, Plan, PlannedAction
from ..providers.base import Provider
from ..state.models import ProviderState, StateEntry
from ..state.store import StateStore
from ..utils.errors import (
    ApplyCancelledError,
    ConfigValidationError,
    PartialApplyError,
    ProviderError,
    StateStoreError,
    TransientProviderError,
)
from ..utils.logging import get_logger
from .models import ActionOutcome, ActionStatus, ApplyResult, ExecutorSettings

logger = get_logger("execution.executor")


def resolve_references(value: Any, state: ProviderState, node_id: Optional[str] = None) -> Any:
    """
    Replace ${id} / ${id.attr} tokens with values from applied state.

    A string that is exactly one token takes the referenced value as is;
    tokens embedded in longer strings are substituted as text. Escaped
    "$${...}" sequences come out as a literal "${...}".
    """
    if isinstance(value, dict):
        return {key: resolve_references(item, state, node_id) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_references(item, state, node_id) for item in value]
    if not isinstance(value, str):
        return value

    whole = REFERENCE_PATTERN.fullmatch(value)
    if whole:
        return _lookup(whole.group(1), whole.group(2), state, node_id)
    text = REFERENCE_PATTERN.sub(
        lambda match: str(_lookup(match.group(1), match.group(2), state, node_id)), value
    )
    return text.replace(ESCAPED_REFERENCE, "${")


def _lookup(ref_id: str, attribute: Optional[str], state: ProviderState, node_id: Optional[str]) -> Any:
    entry = state.get(ref_id)
    if entry is None:
        raise ConfigValidationError(
            f"Resource '{node_id}' references '{ref_id}', which has not been applied",
            node_id=node_id,
        )
    if attribute in (None, "id"):
        return entry.provider_id
    if attribute in entry.outputs:
        return entry.outputs[attribute]
    if attribute in entry.config:
        return entry.config[attribute]
    raise ConfigValidationError(
        f"Resource '{node_id}' references unknown attribute '{attribute}' of '{ref_id}'",
        node_id=node_id,
    )


class Executor:
    """
    Applies plans with bounded concurrency and retry.

    An action starts only once every action it requires has succeeded.
    Transient provider errors are retried with exponential backoff; a
    permanent error stops new actions from starting, lets in-flight ones
    finish and raises PartialApplyError.
    """

    def __init__(
        self,
        provider: Provider,
        state_store: StateStore,
        settings: Optional[ExecutorSettings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.state_store = state_store
        self.settings = settings or ExecutorSettings()
        self._sleep = sleep
        self._cancel_requested = False

    def cancel(self) -> None:
        """
        Stop starting new actions; in-flight actions run to completion.

        The flag is cleared when the next apply() starts.
        """
        if not self._cancel_requested:
            logger.warning("Cancellation requested, no further actions will start")
        self._cancel_requested = True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    async def apply(self, plan: Plan) -> ApplyResult:
        """
        Apply every action of the plan.

        Returns:
            ApplyResult with every action SUCCEEDED

        Raises:
            PartialApplyError: If any action failed (result attached)
            ApplyCancelledError: If cancel() was called before all actions ran
        """
        self._cancel_requested = False
        state = self.state_store.load()
        state.stack = plan.stack
        outcomes: Dict[str, ActionOutcome] = {
            planned.node_id: ActionOutcome(node_id=planned.node_id, action=planned.action)
            for planned in plan.actions
        }
        pending: List[PlannedAction] = list(plan.actions)
        running: Dict[asyncio.Task, PlannedAction] = {}
        aborted = False

        logger.info(f"Applying {len(plan.actions)} actions for '{plan.stack}' via {self.provider.name}")

        try:
            while pending or running:
                if not aborted and not self._cancel_requested:
                    for planned in self._ready(pending, outcomes):
                        if len(running) >= self.settings.concurrency:
                            break
                        pending.remove(planned)
                        outcomes[planned.node_id].status = ActionStatus.IN_FLIGHT
                        task = asyncio.create_task(self._run_action(planned, state, outcomes[planned.node_id]))
                        running[task] = planned

                if not running:
                    break

                done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    running.pop(task)
                    if not task.result():
                        aborted = True
        except asyncio.CancelledError:
            self._cancel_requested = True
            if running:
                logger.warning(f"Apply cancelled, waiting for {len(running)} in-flight actions")
                await self._drain(set(running))
            self._finish(plan, outcomes)
            raise

        result = self._finish(plan, outcomes)

        if result.failed:
            raise PartialApplyError(
                f"Apply of '{plan.stack}' failed: {len(result.succeeded)} succeeded, "
                f"{len(result.failed)} failed ({', '.join(result.failed)}), "
                f"{len(result.unattempted)} unattempted",
                result=result,
            )
        if result.unattempted:
            if self._cancel_requested:
                result.cancelled = True
                raise ApplyCancelledError(
                    f"Apply of '{plan.stack}' cancelled: {len(result.succeeded)} succeeded, "
                    f"{len(result.unattempted)} unattempted",
                    result=result,
                )
            raise PartialApplyError(
                f"Apply of '{plan.stack}' stalled: {', '.join(result.unattempted)} "
                f"require actions that never ran",
                result=result,
            )

        logger.info(f"Apply of '{plan.stack}' complete: {len(result.succeeded)} actions succeeded")
        return result

    @staticmethod
    async def _drain(tasks) -> None:
        """Wait for tasks to finish; repeated cancellation does not interrupt them."""
        while tasks:
            try:
                _, tasks = await asyncio.wait(tasks)
            except asyncio.CancelledError:
                logger.warning(f"Apply cancelled again, still waiting for {len(tasks)} in-flight actions")

    @staticmethod
    def _ready(pending: List[PlannedAction], outcomes: Dict[str, ActionOutcome]) -> List[PlannedAction]:
        """Pending actions whose required actions all succeeded, plan order."""
        ready = []
        for planned in pending:
            required = [outcomes[node_id] for node_id in planned.requires if node_id in outcomes]
            if all(outcome.status == ActionStatus.SUCCEEDED for outcome in required):
                ready.append(planned)
        return ready

    @staticmethod
    def _finish(plan: Plan, outcomes: Dict[str, ActionOutcome]) -> ApplyResult:
        for outcome in outcomes.values():
            if outcome.status == ActionStatus.PENDING:
                outcome.status = ActionStatus.UNATTEMPTED
        return ApplyResult(
            stack=plan.stack,
            outcomes=[outcomes[planned.node_id] for planned in plan.actions],
        )

    async def _run_action(self, planned: PlannedAction, state: ProviderState, outcome: ActionOutcome) -> bool:
        """Run one action to a terminal state. Returns True on success."""
        action = ActionType(planned.action)
        for attempt in range(1, self.settings.max_attempts + 1):
            outcome.attempts = attempt
            try:
                outcome.provider_id = await self._dispatch(planned, state)
            except TransientProviderError as e:
                if attempt >= self.settings.max_attempts:
                    return self._fail(outcome, e, f"gave up after {attempt} attempts")
                delay = self.settings.backoff_delay(attempt)
                logger.warning(
                    f"Transient error on {action.value} {planned.node_id} "
                    f"(attempt {attempt}/{self.settings.max_attempts}), retrying in {delay:.1f}s: {e}"
                )
                await self._sleep(delay)
                continue
            except (ProviderError, ConfigValidationError, StateStoreError) as e:
                return self._fail(outcome, e)
            except Exception as e:
                logger.error(f"Unexpected error on {action.value} {planned.node_id}: {e}", exc_info=True)
                return self._fail(outcome, e)

            outcome.status = ActionStatus.SUCCEEDED
            logger.info(f"{action.value} {planned.node_id} succeeded ({outcome.provider_id})")
            return True
        return False

    @staticmethod
    def _fail(outcome: ActionOutcome, error: Exception, detail: Optional[str] = None) -> bool:
        if isinstance(error, ProviderError) and error.node_id is None:
            error.node_id = outcome.node_id
        outcome.status = ActionStatus.FAILED
        outcome.error = f"{error} ({detail})" if detail else str(error)
        logger.error(f"{outcome.action.value} {outcome.node_id} failed: {outcome.error}")
        return False

    async def _dispatch(self, planned: PlannedAction, state: ProviderState) -> str:
        """Call the provider and write the result back to state."""
        action = ActionType(planned.action)
        node_id = planned.node_id

        if action == ActionType.CREATE:
            resolved = resolve_references(planned.config, state, node_id)
            result = await self.provider.create(planned.kind, resolved)
            provider_id = result.provider_id
            outputs = result.outputs
        else:
            entry = state.get(node_id)
            if entry is None:
                raise StateStoreError(f"No state entry for '{node_id}'; re-run plan")
            provider_id = entry.provider_id
            if action == ActionType.UPDATE:
                resolved = resolve_references(planned.config, state, node_id)
                result = await self.provider.update(planned.kind, provider_id, resolved)
                outputs = result.outputs
            else:
                await self.provider.delete(planned.kind, provider_id)

        if action == ActionType.DELETE:
            state.entries.pop(node_id, None)
        else:
            state.entries[node_id] = StateEntry(
                kind=planned.kind,
                config=dict(planned.config),
                references=list(planned.references),
                provider_id=provider_id,
                outputs=outputs,
            )
        self.state_store.save(state)
        return provider_id


def apply_plan(
    plan: Plan,
    provider: Provider,
    state_store: StateStore,
    settings: Optional[ExecutorSettings] = None,
) -> ApplyResult:
    """Synchronous wrapper around Executor.apply."""
    executor = Executor(provider, state_store, settings)
    return asyncio.run(executor.apply(plan))
