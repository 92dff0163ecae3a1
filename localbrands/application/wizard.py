"""Project creation wizard.

The wizard walks one session through ``upload -> analyzing -> review ->
publishing`` and ends either ``completed`` (the published project has been
saved) or ``cancelled``. All changes go through :meth:`WizardStateMachine.dispatch`,
which applies one action to a plain :class:`WizardState` record and returns it.

Only analysis and publishing suspend the machine. While either call is
outstanding no second one can start, and a result that arrives after the
session was cancelled is dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal, Union

from localbrands.core import HistoryManager, digits_only
from localbrands.domain import TEMPLATE_IDS, AnalysisResult, Project, PublishRequest, PublishRun
from localbrands.errors import WizardActionRejected
from localbrands.infrastructure import (
    AnalysisAdapter,
    JsonStore,
    Preferences,
    get_analysis_adapter,
    get_preferences_store,
    load_preferences,
    save_preferences,
)
from localbrands.workers.publish import PublishOrchestrator, get_publish_orchestrator

from .projects import ProjectService, get_project_service

logger = logging.getLogger(__name__)

WizardStep = Literal["upload", "analyzing", "review", "publishing", "completed", "cancelled"]

TERMINAL_STEPS: frozenset[str] = frozenset({"completed", "cancelled"})
EDITABLE_FIELDS: frozenset[str] = frozenset({"business_name_suggestion", "headline", "story"})


# ----------------------------------------------------------------------
# actions
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SelectPhoto:
    photo: str


@dataclass(frozen=True, slots=True)
class Analyze:
    pass


@dataclass(frozen=True, slots=True)
class EditField:
    """Change a field of the working copy without recording history."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class CommitEdit:
    """Record the working copy in history (field blur or confirm)."""


@dataclass(frozen=True, slots=True)
class SelectTemplate:
    template_id: str


@dataclass(frozen=True, slots=True)
class SetPhone:
    phone: str


@dataclass(frozen=True, slots=True)
class SetLocation:
    location: str


@dataclass(frozen=True, slots=True)
class Undo:
    pass


@dataclass(frozen=True, slots=True)
class Redo:
    pass


@dataclass(frozen=True, slots=True)
class Publish:
    pass


@dataclass(frozen=True, slots=True)
class Cancel:
    pass


WizardAction = Union[
    SelectPhoto,
    Analyze,
    EditField,
    CommitEdit,
    SelectTemplate,
    SetPhone,
    SetLocation,
    Undo,
    Redo,
    Publish,
    Cancel,
]


@dataclass(slots=True)
class WizardState:
    """Transient state of one wizard session."""

    step: WizardStep = "upload"
    photo: str | None = None
    phone: str = ""
    location: str = ""
    content: AnalysisResult | None = None
    history: HistoryManager[AnalysisResult] = field(default_factory=HistoryManager)
    publish_run: PublishRun = field(default_factory=PublishRun)
    original: Project | None = None
    project: Project | None = None
    error: str | None = None

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def can_publish(self) -> bool:
        return self.step == "review" and bool(self.phone) and self.content is not None


class WizardStateMachine:
    def __init__(
        self,
        analyzer: AnalysisAdapter,
        orchestrator: PublishOrchestrator,
        projects: ProjectService,
        *,
        preferences: Preferences | None = None,
        preferences_store: JsonStore | None = None,
        on_change: Callable[[WizardState], None] | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._orchestrator = orchestrator
        self._projects = projects
        self._preferences = preferences or Preferences()
        self._preferences_store = preferences_store
        self._on_change = on_change
        self._state = WizardState()
        self._generation = 0
        self._in_flight = False
        self._handlers: dict[type, Callable[..., Awaitable[None]]] = {
            SelectPhoto: self._select_photo,
            Analyze: self._analyze,
            EditField: self._edit_field,
            CommitEdit: self._commit_edit,
            SelectTemplate: self._select_template,
            SetPhone: self._set_phone,
            SetLocation: self._set_location,
            Undo: self._undo,
            Redo: self._redo,
            Publish: self._publish,
            Cancel: self._cancel,
        }

    @classmethod
    def edit(
        cls,
        project: Project,
        analyzer: AnalysisAdapter,
        orchestrator: PublishOrchestrator,
        projects: ProjectService,
        **kwargs,
    ) -> "WizardStateMachine":
        """Open an existing project straight in the review step."""

        machine = cls(analyzer, orchestrator, projects, **kwargs)
        snapshot = project.to_analysis()
        machine._state = WizardState(
            step="review",
            photo=project.image_ref,
            phone=project.phone,
            location=project.location or "",
            content=snapshot,
            history=HistoryManager(snapshot),
            original=project,
        )
        return machine

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._in_flight

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    async def dispatch(self, action: WizardAction) -> WizardState:
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"unsupported wizard action: {action!r}")
        if self._state.step in TERMINAL_STEPS:
            raise WizardActionRejected(f"the session is already {self._state.step}")
        await handler(action)
        return self._state

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._state)

    def _require_step(self, *steps: WizardStep) -> None:
        if self._state.step not in steps:
            raise WizardActionRejected(
                f"action not allowed in step {self._state.step!r} (expected {', '.join(steps)})"
            )

    def _require_idle(self) -> None:
        if self._in_flight:
            raise WizardActionRejected("another request is still in progress")

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _begin_call(self) -> int:
        self._in_flight = True
        return self._generation

    def _end_call(self, generation: int) -> None:
        if not self._is_stale(generation):
            self._in_flight = False

    # ------------------------------------------------------------------
    # upload / analysis
    # ------------------------------------------------------------------
    async def _select_photo(self, action: SelectPhoto) -> None:
        self._require_step("upload")
        self._state.photo = action.photo or None
        self._state.error = None
        self._notify()

    async def _analyze(self, action: Analyze) -> None:
        self._require_step("upload")
        self._require_idle()
        state = self._state
        if not state.photo:
            return

        state.step = "analyzing"
        state.error = None
        generation = self._begin_call()
        self._notify()
        try:
            result = await self._analyzer.analyze(state.photo, self._preferences.language)
        except Exception as exc:
            if self._is_stale(generation):
                return
            logger.exception("image analysis failed without fallback")
            state.step = "upload"
            state.error = str(exc) or "Failed to analyze image"
            state.content = None
            state.history = HistoryManager()
            self._notify()
            return
        finally:
            self._end_call(generation)

        if self._is_stale(generation):
            logger.info("discarding analysis result for a cancelled session")
            return
        state.content = result
        state.history = HistoryManager(result)
        if result.location_suggestion and not state.location:
            state.location = result.location_suggestion
        state.step = "review"
        self._notify()

    # ------------------------------------------------------------------
    # review
    # ------------------------------------------------------------------
    async def _edit_field(self, action: EditField) -> None:
        self._require_step("review")
        if action.name not in EDITABLE_FIELDS:
            raise WizardActionRejected(f"field {action.name!r} cannot be edited")
        self._state.content = self._state.content.model_copy(update={action.name: action.value})
        self._notify()

    async def _commit_edit(self, action: CommitEdit) -> None:
        self._require_step("review")
        if self._state.history.append(self._state.content):
            self._notify()

    async def _select_template(self, action: SelectTemplate) -> None:
        self._require_step("review")
        if action.template_id not in TEMPLATE_IDS:
            raise WizardActionRejected(f"unknown template {action.template_id!r}")
        content = self._state.content.model_copy(update={"suggested_template": action.template_id})
        self._state.content = content
        self._state.history.append(content)
        self._notify()

    async def _set_phone(self, action: SetPhone) -> None:
        self._require_step("review")
        self._state.phone = digits_only(action.phone)
        self._notify()

    async def _set_location(self, action: SetLocation) -> None:
        self._require_step("review")
        self._state.location = action.location.strip()
        self._notify()

    async def _undo(self, action: Undo) -> None:
        self._require_step("review")
        snapshot = self._state.history.undo()
        if snapshot is not None:
            self._state.content = snapshot
            self._notify()

    async def _redo(self, action: Redo) -> None:
        self._require_step("review")
        snapshot = self._state.history.redo()
        if snapshot is not None:
            self._state.content = snapshot
            self._notify()

    # ------------------------------------------------------------------
    # publishing
    # ------------------------------------------------------------------
    def _publish_request(self) -> PublishRequest:
        state = self._state
        content = state.content
        return PublishRequest(
            business_name=content.business_name_suggestion,
            headline=content.headline,
            story=content.story,
            phone=state.phone,
            image_url=state.photo or "",
            template_id=content.suggested_template,
            location=state.location or None,
        )

    async def _publish(self, action: Publish) -> None:
        self._require_step("review")
        self._require_idle()
        state = self._state
        if not state.can_publish:
            raise WizardActionRejected("a WhatsApp number is required before publishing")

        request = self._publish_request()
        state.step = "publishing"
        state.error = None
        state.publish_run = PublishRun()
        generation = self._begin_call()
        self._notify()

        def on_progress(run: PublishRun) -> None:
            if not self._is_stale(generation):
                self._notify()

        try:
            outcome = await self._orchestrator.run(
                request,
                existing=state.original,
                on_progress=on_progress,
                run=state.publish_run,
            )
        except Exception as exc:
            if self._is_stale(generation):
                return
            logger.exception("publish run crashed")
            message = str(exc) or "Internal server error"
            state.publish_run.fail(message)
            state.step = "review"
            state.error = message
            self._notify()
            return
        finally:
            self._end_call(generation)

        if self._is_stale(generation):
            logger.info("discarding publish result for a cancelled session")
            return
        if not outcome.succeeded or outcome.project is None:
            state.step = "review"
            state.error = outcome.run.error
            self._notify()
            return

        self._projects.save_project(outcome.project)
        if self._preferences_store is not None:
            save_preferences(self._preferences_store, self._preferences)
        state.project = outcome.project
        state.step = "completed"
        self._notify()

    # ------------------------------------------------------------------
    # cancellation
    # ------------------------------------------------------------------
    async def _cancel(self, action: Cancel) -> None:
        self._generation += 1
        self._in_flight = False
        self._state.step = "cancelled"
        self._notify()


def start_wizard(
    project: Project | None = None,
    *,
    preferences: Preferences | None = None,
    on_change: Callable[[WizardState], None] | None = None,
) -> WizardStateMachine:
    """Open a session wired to the process-wide collaborators.

    With ``project`` the session edits that project; otherwise it starts at upload.
    Preferences default to the ones stored in the configured preferences store and
    are written back there when the session completes.
    """

    analyzer = get_analysis_adapter()
    orchestrator = get_publish_orchestrator()
    projects = get_project_service()
    store = get_preferences_store()
    if preferences is None and store is not None:
        preferences = load_preferences(store)
    options = {"preferences": preferences, "preferences_store": store, "on_change": on_change}
    if project is not None:
        return WizardStateMachine.edit(project, analyzer, orchestrator, projects, **options)
    return WizardStateMachine(analyzer, orchestrator, projects, **options)


__all__ = [
    "Analyze",
    "Cancel",
    "CommitEdit",
    "EditField",
    "Publish",
    "Redo",
    "SelectPhoto",
    "SelectTemplate",
    "SetLocation",
    "SetPhone",
    "Undo",
    "WizardAction",
    "WizardState",
    "WizardStateMachine",
    "WizardStep",
    "start_wizard",
]
