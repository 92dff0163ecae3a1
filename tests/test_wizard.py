from __future__ import annotations

import asyncio

import httpx
import pytest

from localbrands.application import ProjectService
from localbrands.application.wizard import (
    Analyze,
    Cancel,
    CommitEdit,
    EditField,
    Publish,
    Redo,
    SelectPhoto,
    SelectTemplate,
    SetLocation,
    SetPhone,
    Undo,
    WizardStateMachine,
)
from localbrands.domain import PUBLISH_STEPS, AnalysisResult, Project
from localbrands.errors import WizardActionRejected
from localbrands.infrastructure import (
    AnalysisAdapter,
    InMemoryProjectRepository,
    JsonProjectRepository,
    JsonStore,
    Preferences,
)
from localbrands.infrastructure.gemini import GeminiVisionClient
from localbrands.workers.publish import PublishOrchestrator

PHOTO = "data:image/jpeg;base64,/9j/4AAQ"
FALLBACK_HEADLINE = "Excellence in Every Detail"


def _unreachable_adapter() -> AnalysisAdapter:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = GeminiVisionClient("key", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    return AnalysisAdapter(client)


class BlockingAnalyzer:
    def __init__(self, result: AnalysisResult | None = None, error: Exception | None = None) -> None:
        self.release = asyncio.Event()
        self.calls = 0
        self.result = result
        self.error = error

    async def analyze(self, image: str, language: str = "en") -> AnalysisResult:
        self.calls += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


def _published_project() -> Project:
    return Project(
        id="1700000000000",
        business_name="Batik Sekar",
        image_ref="https://example.com/batik.jpg",
        headline="Motif warisan, gaya masa kini",
        story="Setiap helai dibatik tangan.",
        phone="628123456789",
        location="Solo",
        template_id="fashion",
        status="published",
        published_url="https://acme.github.io/batik-sekar/",
        repo_url="https://github.com/acme/batik-sekar",
        created_at=1_700_000_000_000,
    )


@pytest.fixture()
def service() -> ProjectService:
    return ProjectService(InMemoryProjectRepository())


def test_end_to_end_with_unreachable_analysis(repositories, site_host, service):
    observed: list[tuple[str, str]] = []
    machine = WizardStateMachine(
        _unreachable_adapter(),
        PublishOrchestrator(repositories, site_host),
        service,
        on_change=lambda state: observed.append((state.step, state.publish_run.status)),
    )

    async def scenario():
        await machine.dispatch(SelectPhoto(PHOTO))
        state = await machine.dispatch(Analyze())
        assert state.step == "review"
        assert state.content.business_name_suggestion == "Luxe Local"
        assert state.content.headline == FALLBACK_HEADLINE
        assert len(state.history) == 1 and state.history.cursor == 0

        assert not state.can_undo and not state.can_publish
        await machine.dispatch(EditField("headline", "New Headline"))
        assert len(state.history) == 1
        state = await machine.dispatch(CommitEdit())
        assert len(state.history) == 2
        assert state.history.cursor == 1
        assert state.can_undo and not state.can_redo

        state = await machine.dispatch(Undo())
        assert state.history.current().headline == FALLBACK_HEADLINE
        assert state.content.headline == FALLBACK_HEADLINE
        assert len(state.history) == 2
        assert state.can_redo

        state = await machine.dispatch(SetPhone("628123456789"))
        assert state.can_publish
        return await machine.dispatch(Publish())

    state = asyncio.run(scenario())

    statuses = [status for step, status in observed if step == "publishing" and status != "idle"]
    assert list(dict.fromkeys(statuses)) == ["generating", "pushing", "deploying", "completed"]
    assert state.publish_run.history == list(PUBLISH_STEPS)
    assert state.step == "completed"
    project = state.project
    assert project.status == "published"
    assert project.published_url
    assert project.headline == FALLBACK_HEADLINE
    assert service.get_project(project.id) == project


def test_redo_and_template_selection_record_history(repositories, site_host, service):
    machine = WizardStateMachine(_unreachable_adapter(), PublishOrchestrator(repositories, site_host), service)

    async def scenario():
        await machine.dispatch(SelectPhoto(PHOTO))
        await machine.dispatch(Analyze())
        await machine.dispatch(SelectTemplate("culinary"))
        await machine.dispatch(Undo())
        state = await machine.dispatch(Redo())
        assert state.content.suggested_template == "culinary"
        # committing unchanged content adds nothing
        state = await machine.dispatch(CommitEdit())
        assert len(state.history) == 2
        with pytest.raises(WizardActionRejected):
            await machine.dispatch(SelectTemplate("bakery"))
        with pytest.raises(WizardActionRejected):
            await machine.dispatch(EditField("phone", "123"))
        with pytest.raises(WizardActionRejected):
            await machine.dispatch(EditField("location_suggestion", "Jakarta"))

    asyncio.run(scenario())


def test_analyze_without_photo_is_noop(repositories, site_host, service):
    analyzer = BlockingAnalyzer()
    machine = WizardStateMachine(analyzer, PublishOrchestrator(repositories, site_host), service)

    state = asyncio.run(machine.dispatch(Analyze()))

    assert state.step == "upload"
    assert analyzer.calls == 0


def test_analysis_location_suggestion_is_adopted(repositories, site_host, service):
    analyzer = BlockingAnalyzer(
        AnalysisResult(
            business_name_suggestion="Kopi Senja",
            headline="Secangkir cerita sore",
            story="Kopi pilihan.",
            suggested_template="culinary",
            location_suggestion="Bandung",
        )
    )
    analyzer.release.set()
    machine = WizardStateMachine(
        analyzer, PublishOrchestrator(repositories, site_host), service, preferences=Preferences(language="id")
    )

    async def scenario():
        await machine.dispatch(SelectPhoto(PHOTO))
        return await machine.dispatch(Analyze())

    state = asyncio.run(scenario())

    assert state.location == "Bandung"
    assert state.content.business_name_suggestion == "Kopi Senja"


def test_unrecoverable_analysis_failure_returns_to_upload(repositories, site_host, service):
    analyzer = BlockingAnalyzer(error=RuntimeError("fallback construction failed"))
    analyzer.release.set()
    machine = WizardStateMachine(analyzer, PublishOrchestrator(repositories, site_host), service)

    async def scenario():
        await machine.dispatch(SelectPhoto(PHOTO))
        return await machine.dispatch(Analyze())

    state = asyncio.run(scenario())

    assert state.step == "upload"
    assert state.error == "fallback construction failed"
    assert state.content is None
    assert len(state.history) == 0
    assert not machine.busy


def test_publish_requires_phone(repositories, site_host, service):
    machine = WizardStateMachine.edit(
        _published_project().model_copy(update={"phone": ""}),
        _unreachable_adapter(),
        PublishOrchestrator(repositories, site_host),
        service,
    )

    with pytest.raises(WizardActionRejected, match="WhatsApp"):
        asyncio.run(machine.dispatch(Publish()))
    assert machine.state.step == "review"
    assert repositories.calls == []


def test_failed_publish_returns_to_review_and_can_be_retried(repositories, site_host, service):
    repositories.fail_on = "create"
    repositories.message = "Failed to create repository: name already exists on this account"
    machine = WizardStateMachine.edit(
        _published_project(), _unreachable_adapter(), PublishOrchestrator(repositories, site_host), service
    )

    async def scenario():
        state = await machine.dispatch(Publish())
        assert state.step == "review"
        assert state.error == "Failed to create repository: name already exists on this account"
        assert state.publish_run.status == "failed"
        assert site_host.calls == []
        assert service.list_projects() == []

        repositories.fail_on = None
        return await machine.dispatch(Publish())

    state = asyncio.run(scenario())

    assert state.step == "completed"
    assert state.publish_run.history == list(PUBLISH_STEPS)
    assert state.project.id == "1700000000000"
    assert state.project.created_at == 1_700_000_000_000


def test_second_analysis_is_rejected_and_cancel_discards_late_result(repositories, site_host, service):
    analyzer = BlockingAnalyzer(
        AnalysisResult(
            business_name_suggestion="Late",
            headline="Too late",
            story="Arrives after cancel.",
            suggested_template="service",
        )
    )
    machine = WizardStateMachine(analyzer, PublishOrchestrator(repositories, site_host), service)

    async def scenario():
        await machine.dispatch(SelectPhoto(PHOTO))
        task = asyncio.create_task(machine.dispatch(Analyze()))
        await asyncio.sleep(0)
        assert machine.state.step == "analyzing"
        assert machine.busy

        with pytest.raises(WizardActionRejected):
            await machine.dispatch(Analyze())

        await machine.dispatch(Cancel())
        analyzer.release.set()
        return await task

    state = asyncio.run(scenario())

    assert analyzer.calls == 1
    assert state.step == "cancelled"
    assert state.content is None
    with pytest.raises(WizardActionRejected):
        asyncio.run(machine.dispatch(SelectPhoto(PHOTO)))


def test_cancel_during_publish_does_not_persist(repositories, site_host, service):
    repositories.release = asyncio.Event()
    machine = WizardStateMachine.edit(
        _published_project(), _unreachable_adapter(), PublishOrchestrator(repositories, site_host), service
    )

    async def scenario():
        task = asyncio.create_task(machine.dispatch(Publish()))
        await asyncio.sleep(0)
        assert machine.state.publish_run.status == "pushing"
        with pytest.raises(WizardActionRejected):
            await machine.dispatch(Publish())
        await machine.dispatch(Cancel())
        repositories.release.set()
        return await task

    state = asyncio.run(scenario())

    assert state.step == "cancelled"
    assert state.project is None
    assert service.list_projects() == []


def test_editing_and_cancelling_leaves_stored_project_untouched(tmp_path, repositories, site_host):
    store = JsonStore(tmp_path)
    service = ProjectService(JsonProjectRepository(store))
    original = _published_project()
    service.save_project(original)
    stored_path = store.path_for("local-brands-projects")
    before = stored_path.read_bytes()

    machine = WizardStateMachine.edit(
        service.get_project(original.id),
        _unreachable_adapter(),
        PublishOrchestrator(repositories, site_host),
        service,
    )

    async def scenario():
        state = machine.state
        assert state.step == "review"
        assert state.content.business_name_suggestion == "Batik Sekar"
        assert len(state.history) == 1
        await machine.dispatch(EditField("headline", "Something else"))
        await machine.dispatch(CommitEdit())
        await machine.dispatch(SetLocation("Jakarta"))
        await machine.dispatch(SetPhone("62 999"))
        return await machine.dispatch(Cancel())

    state = asyncio.run(scenario())

    assert state.step == "cancelled"
    assert stored_path.read_bytes() == before
    assert service.get_project(original.id) == original
    assert repositories.calls == []


def test_start_wizard_uses_configured_collaborators(tmp_path, repositories, site_host):
    from localbrands.application import configure_project_repository, get_project_service, start_wizard
    from localbrands.infrastructure import configure_analysis_adapter, get_analysis_adapter
    from localbrands.workers.publish import configure_publish_orchestrator

    previous_adapter = get_analysis_adapter()
    configure_analysis_adapter(_unreachable_adapter())
    configure_publish_orchestrator(PublishOrchestrator(repositories, site_host))
    configure_project_repository(JsonProjectRepository(JsonStore(tmp_path)))
    try:
        fresh = start_wizard(preferences=Preferences(language="id"))
        editing = start_wizard(_published_project())

        async def scenario():
            await fresh.dispatch(SelectPhoto(PHOTO))
            state = await fresh.dispatch(Analyze())
            assert state.content.headline == "Keunggulan dalam Setiap Detail"
            await editing.dispatch(EditField("story", "Cerita baru."))
            return await editing.dispatch(Publish())

        state = asyncio.run(scenario())

        assert state.step == "completed"
        stored = get_project_service().get_project("1700000000000")
        assert stored.story == "Cerita baru."
        assert stored.published_url == "https://acme.github.io/site/"
    finally:
        configure_analysis_adapter(previous_adapter)
        configure_publish_orchestrator(None)
        configure_project_repository(InMemoryProjectRepository())


def test_start_wizard_loads_and_saves_stored_preferences(tmp_path, repositories, site_host):
    from localbrands.application import start_wizard
    from localbrands.infrastructure import (
        configure_analysis_adapter,
        configure_preferences_store,
        get_analysis_adapter,
        load_preferences,
        save_preferences,
    )
    from localbrands.workers.publish import configure_publish_orchestrator

    store = JsonStore(tmp_path)
    save_preferences(store, Preferences(language="id"))
    previous_adapter = get_analysis_adapter()
    configure_analysis_adapter(_unreachable_adapter())
    configure_publish_orchestrator(PublishOrchestrator(repositories, site_host))
    configure_preferences_store(store)
    try:
        machine = start_wizard()
        assert machine.preferences == Preferences(language="id")

        async def analyze():
            await machine.dispatch(SelectPhoto(PHOTO))
            return await machine.dispatch(Analyze())

        state = asyncio.run(analyze())
        assert state.content.headline == "Keunggulan dalam Setiap Detail"

        editing = start_wizard(_published_project(), preferences=Preferences(language="en", theme="dark"))
        state = asyncio.run(editing.dispatch(Publish()))

        assert state.step == "completed"
        assert load_preferences(store) == Preferences(language="en", theme="dark")
    finally:
        configure_analysis_adapter(previous_adapter)
        configure_publish_orchestrator(None)
