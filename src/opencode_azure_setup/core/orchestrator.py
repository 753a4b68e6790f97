"""Setup flow: gather Azure settings, test them, and save them.

The flow is a single linear pass through ``SetupState``::

    init -> resolve_prior_config -> gather_endpoint -> gather_credential
         -> gather_deployment -> probe -> (success | retry_prompt -> probe_retry
         | accept_failure) -> commit -> done

All terminal interaction goes through the session's ``PromptIO`` so the flow
can be driven by a scripted fake in tests.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from opencode_azure_setup.core.exceptions import MissingInputError, SetupAborted
from opencode_azure_setup.core.prompts import Tone
from opencode_azure_setup.core.session import SetupSession
from opencode_azure_setup.installers.base import AuxiliaryTask, TaskPhase, TaskResult, run_task
from opencode_azure_setup.llm.defaults import fetch_defaults
from opencode_azure_setup.llm.endpoint import parse_azure_endpoint
from opencode_azure_setup.llm.models import Credential, Defaults, EndpointDescriptor, ProbeResult, ProviderSettings
from opencode_azure_setup.llm.prober import ConnectivityProber

logger = logging.getLogger(__name__)

DefaultsProvider = Callable[[], Awaitable[Defaults]]


class SetupState(str, Enum):
    INIT = "init"
    RESOLVE_PRIOR_CONFIG = "resolve_prior_config"
    GATHER_ENDPOINT = "gather_endpoint"
    GATHER_CREDENTIAL = "gather_credential"
    GATHER_DEPLOYMENT = "gather_deployment"
    PROBE = "probe"
    SUCCESS = "success"
    RETRY_PROMPT = "retry_prompt"
    PROBE_RETRY = "probe_retry"
    ACCEPT_FAILURE = "accept_failure"
    COMMIT = "commit"
    DONE = "done"


class SetupMode(str, Enum):
    """How values are gathered."""

    FRESH = "fresh"
    REUSE = "reuse"
    UNATTENDED = "unattended"


class SetupOutcome(BaseModel):
    """What a completed setup run did."""

    mode: SetupMode
    endpoint: EndpointDescriptor
    probe: ProbeResult
    config_path: Path
    preserved: List[str] = Field(default_factory=list)
    tasks: List[TaskResult] = Field(default_factory=list)


class SetupOrchestrator:
    """Runs one setup session from loading prior state to saving the result."""

    def __init__(
        self,
        session: SetupSession,
        prober: Optional[ConnectivityProber] = None,
        defaults_provider: Optional[DefaultsProvider] = None,
        tasks: Optional[Sequence[AuxiliaryTask]] = None,
    ):
        self.session = session
        self.io = session.io
        self.prober = prober or ConnectivityProber(timeout=session.settings.probe_timeout)
        self.defaults_provider = defaults_provider or self._fetch_defaults
        self.tasks = list(tasks or [])
        self.state = SetupState.INIT

    async def _fetch_defaults(self) -> Defaults:
        settings = self.session.settings
        return await fetch_defaults(settings.defaults_url, timeout=settings.defaults_timeout)

    def _enter(self, state: SetupState) -> None:
        logger.debug(f"Setup state {self.state.value} -> {state.value}")
        self.state = state

    async def run(self) -> SetupOutcome:
        """Run the whole flow.

        Raises:
            MissingInputError: A required value is missing and has no fallback.
                Nothing has been written when this is raised.
            SetupAborted: The user declined to save after the retry failed.
                Nothing has been written when this is raised.
        """
        self._enter(SetupState.RESOLVE_PRIOR_CONFIG)
        prior = self.session.load()
        mode = self._resolve_mode(prior)
        self._announce_prior(mode)

        if mode is SetupMode.UNATTENDED:
            endpoint, credential = self._use_prior(prior)
        else:
            defaults = await self.defaults_provider()
            endpoint = self._gather_endpoint(mode, prior, defaults)
            credential = self._gather_credential(prior)
            endpoint = self._gather_deployment(endpoint, prior)

        endpoint, result = await self._verify(mode, endpoint, credential)
        return await self._commit(mode, endpoint, credential, result)

    def _resolve_mode(self, prior: Optional[ProviderSettings]) -> SetupMode:
        if self.session.unattended:
            if prior is None or not prior.is_complete:
                raise MissingInputError(
                    "configuration", "No existing config found. Run without -y flag to configure."
                )
            return SetupMode.UNATTENDED
        if prior is not None and prior.has_endpoint:
            return SetupMode.REUSE
        return SetupMode.FRESH

    def _announce_prior(self, mode: SetupMode) -> None:
        if mode is SetupMode.FRESH:
            return
        self.io.show("✓ Existing configuration found", Tone.SUCCESS)
        if mode is SetupMode.UNATTENDED:
            self.io.show("  Using existing values (non-interactive mode)", Tone.DETAIL)
        else:
            self.io.show("  Press Enter to keep current values, or type new ones", Tone.DETAIL)
        self.io.show()

    def _use_prior(self, prior: ProviderSettings) -> Tuple[EndpointDescriptor, Credential]:
        endpoint = prior.endpoint
        self.io.show(f"  Endpoint: {endpoint.base_url}", Tone.DETAIL)
        self.io.show(f"  Deployment: {endpoint.deployment}", Tone.DETAIL)
        return endpoint, prior.credential

    def _gather_endpoint(
        self, mode: SetupMode, prior: Optional[ProviderSettings], defaults: Defaults
    ) -> EndpointDescriptor:
        self._enter(SetupState.GATHER_ENDPOINT)

        if mode is SetupMode.REUSE:
            self.io.show("Azure OpenAI Endpoint")
            raw = self.io.ask_text("Endpoint", prior.base_url)
            # Exact match only: an equivalent but differently typed URL is re-parsed.
            if raw == prior.base_url:
                logger.debug("Keeping stored endpoint, deployment and API version")
                return prior.endpoint
            return parse_azure_endpoint(raw, defaults)

        self.io.show("Paste your Azure OpenAI endpoint")
        self.io.show("Tip: You can paste the full URL from Azure Portal - we'll extract what we need", Tone.DETAIL)
        self.io.show()
        raw = self.io.ask_text("Endpoint")
        if not raw:
            raise MissingInputError("Endpoint")
        return parse_azure_endpoint(raw, defaults)

    def _gather_credential(self, prior: Optional[ProviderSettings]) -> Credential:
        self._enter(SetupState.GATHER_CREDENTIAL)
        existing = prior.credential if prior is not None else None

        self.io.show()
        answer = self.io.ask_secret("API Key", existing.redacted() if existing else "")
        if answer:
            return Credential.from_key(answer)
        if existing is not None:
            return existing
        raise MissingInputError("API Key")

    def _gather_deployment(
        self, endpoint: EndpointDescriptor, prior: Optional[ProviderSettings]
    ) -> EndpointDescriptor:
        self._enter(SetupState.GATHER_DEPLOYMENT)
        if prior is not None and prior.has_endpoint and endpoint.deployment == prior.deployment:
            return endpoint

        self.io.show()
        deployment = self.io.ask_text("Deployment name", endpoint.deployment)
        return endpoint.with_overrides(deployment=deployment)

    async def _probe(self, endpoint: EndpointDescriptor, credential: Credential) -> ProbeResult:
        result = await self.prober.probe(endpoint, credential)
        if result.ok:
            self.io.show("✓ Connection successful!", Tone.SUCCESS)
        return result

    def _show_failure(self, result: ProbeResult, label: str) -> None:
        self.io.show(f"✗ {label} ({result.status_label})", Tone.ERROR)
        summary = result.error_summary()
        if summary:
            self.io.show(summary, Tone.DETAIL)

    async def _verify(
        self, mode: SetupMode, endpoint: EndpointDescriptor, credential: Credential
    ) -> Tuple[EndpointDescriptor, ProbeResult]:
        self._enter(SetupState.PROBE)
        self.io.show()
        self.io.show("Testing connection...", Tone.INFO)
        self.io.show(f"  {endpoint.deployment_url()}", Tone.DETAIL)

        result = await self._probe(endpoint, credential)
        if result.ok:
            self._enter(SetupState.SUCCESS)
            return endpoint, result

        self._show_failure(result, "Connection failed")
        if mode is SetupMode.UNATTENDED:
            logger.warning(f"Connection test failed ({result.failure}), saving anyway in non-interactive mode")
            self.io.show("⚠ Continuing anyway (non-interactive mode)", Tone.WARNING)
            self._enter(SetupState.ACCEPT_FAILURE)
            return endpoint, result

        self._enter(SetupState.RETRY_PROMPT)
        self.io.show()
        self.io.show("Let's try different settings:", Tone.WARNING)
        endpoint = endpoint.with_overrides(
            deployment=self.io.ask_text("Deployment name", endpoint.deployment),
            api_version=self.io.ask_text("API Version", endpoint.api_version),
        )

        self._enter(SetupState.PROBE_RETRY)
        self.io.show()
        self.io.show("Retrying...", Tone.INFO)
        result = await self._probe(endpoint, credential)
        if result.ok:
            self._enter(SetupState.SUCCESS)
            return endpoint, result

        self._show_failure(result, "Still failing")
        answer = self.io.ask_text("Save config anyway? (y/N)")
        if answer.lower() != "y":
            raise SetupAborted()
        self._enter(SetupState.ACCEPT_FAILURE)
        return endpoint, result

    async def _run_tasks(self, phase: TaskPhase) -> List[TaskResult]:
        results = []
        for task in (t for t in self.tasks if t.phase is phase):
            self.io.show()
            self.io.show(f"Setting up {task.name}...", Tone.INFO)
            result = await run_task(task, self.session.document)
            if result.ok:
                self.io.show(f"✓ {result.message}", Tone.SUCCESS)
                for line in result.details:
                    self.io.show(f"  {line}", Tone.DETAIL)
            else:
                self.io.show(f"⚠ {task.name} install skipped: {result.message}", Tone.WARNING)
                if result.hint:
                    self.io.show(f"  {result.hint}", Tone.DETAIL)
            results.append(result)
        return results

    async def _commit(
        self, mode: SetupMode, endpoint: EndpointDescriptor, credential: Credential, result: ProbeResult
    ) -> SetupOutcome:
        self._enter(SetupState.COMMIT)
        store = self.session.store
        store.merge(self.session.document, endpoint, credential)

        task_results = await self._run_tasks(TaskPhase.BEFORE_SAVE)
        path = store.persist(self.session.document)
        self.io.show()
        self.io.show("✓ Configuration saved!", Tone.SUCCESS)
        self.io.show(f"  {path}", Tone.DETAIL)

        task_results += await self._run_tasks(TaskPhase.AFTER_SAVE)

        preserved = store.preserved_sections(self.session.document)
        if preserved:
            self.io.show(f"  Preserved: {', '.join(preserved)}", Tone.DETAIL)

        self._enter(SetupState.DONE)
        logger.info(f"Setup complete for {endpoint.deployment_url()} (probe ok={result.ok})")
        return SetupOutcome(
            mode=mode,
            endpoint=endpoint,
            probe=result,
            config_path=path,
            preserved=preserved,
            tasks=task_results,
        )
