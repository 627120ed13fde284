import pytest
import pytesseract

from site_agent.agent import SiteAgent
from site_agent.config import Settings
from site_agent.delegates import OCRDelegate
from site_agent.errors import AgentNotRunningError, InputValidationError, UnknownCapabilityError
from site_agent.main import build_agent, run_capability
from site_agent.models import AnalyzeSiteRequest
from site_agent.pipeline.capabilities import Capability

from .conftest import FakeFetcher, FakeOcr, FakePage


def _settings():
    return Settings(openserv_api_key="test-key")


@pytest.fixture
def agent(fake_fetcher):
    agent = build_agent(settings_loader=_settings, fetcher_factory=lambda: fake_fetcher,
                        ocr_factory=lambda: FakeOcr({}))
    agent.start()
    yield agent
    agent.stop()


def test_start_loads_settings_once():
    calls = []

    def loader():
        calls.append(1)
        return _settings()

    agent = SiteAgent(system_prompt="test", settings_loader=loader)
    agent.start()
    agent.start()

    assert agent.is_running
    assert agent.settings.openserv_api_key == "test-key"
    assert calls == [1]

    agent.stop()
    assert not agent.is_running


async def test_dispatch_requires_a_running_agent():
    agent = build_agent(settings_loader=_settings, fetcher_factory=FakeFetcher)

    with pytest.raises(AgentNotRunningError):
        await agent.dispatch("analyzeSite", {"url": "https://shop.example/"})


async def test_dispatch_unknown_capability(agent):
    with pytest.raises(UnknownCapabilityError):
        await agent.dispatch("summarizeVideo", {"url": "https://shop.example/"})


async def test_dispatch_accepts_camel_case_payload(agent, fake_fetcher):
    report = await agent.dispatch("analyzeSite", {"url": "https://shop.example/", "includeProducts": True})

    assert report.startswith("Website: Fractal Shop")
    assert fake_fetcher.closed


@pytest.mark.parametrize("payload", [
    {},
    {"url": "not a url"},
    {"url": "/relative/path"},
    {"url": "https://shop.example/", "includeProducts": "maybe"},
])
async def test_invalid_payload_is_rejected_before_the_handler_runs(payload):
    ran = []

    async def handler(request):
        ran.append(request)
        return "ran"

    agent = SiteAgent(system_prompt="test", settings_loader=_settings)
    agent.add_capability(Capability("analyzeSite", "test", AnalyzeSiteRequest, handler))
    agent.start()

    with pytest.raises(InputValidationError) as excinfo:
        await agent.dispatch("analyzeSite", payload)

    assert excinfo.value.capability == "analyzeSite"
    assert ran == []


def test_duplicate_capability_is_refused(agent):
    with pytest.raises(ValueError):
        agent.add_capability(Capability("analyzeSite", "again", AnalyzeSiteRequest, None))


def test_describe_capabilities_uses_aliases(agent):
    described = {entry["name"]: entry for entry in agent.describe_capabilities()}

    assert set(described) == {"analyzeSite", "extractTextFromImage"}
    assert "includeProducts" in described["analyzeSite"]["schema"]["properties"]
    assert "imageSelector" in described["extractTextFromImage"]["schema"]["properties"]


async def test_run_capability_starts_and_stops_the_agent():
    page = FakePage(images=["https://cdn.example/a.png"])
    agent = build_agent(settings_loader=_settings, fetcher_factory=lambda: FakeFetcher(page),
                        ocr_factory=lambda: FakeOcr({"https://cdn.example/a.png": "Hello"}))

    text = await run_capability("extractTextFromImage", {"url": "https://shop.example/"}, agent=agent)

    assert text == "Image https://cdn.example/a.png:\nHello"
    assert not agent.is_running


def test_start_points_pytesseract_at_configured_binary(monkeypatch):
    monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")
    agent = build_agent(settings_loader=lambda: Settings(tesseract_cmd="/opt/bin/tesseract"),
                        fetcher_factory=FakeFetcher, ocr_factory=lambda: FakeOcr({}))

    OCRDelegate()
    assert pytesseract.pytesseract.tesseract_cmd == "tesseract"

    agent.start()
    assert pytesseract.pytesseract.tesseract_cmd == "/opt/bin/tesseract"
    agent.stop()


def test_start_without_tesseract_cmd_keeps_the_default(monkeypatch):
    monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")
    agent = build_agent(settings_loader=_settings, fetcher_factory=FakeFetcher, ocr_factory=lambda: FakeOcr({}))

    agent.start()

    assert pytesseract.pytesseract.tesseract_cmd == "tesseract"
    agent.stop()
