import pytest
from rich.console import Console

from fakes import FakeLauncher, FakeSession
from proton_docs_mcp.browser.manager import SessionManager
from proton_docs_mcp.config import ServerConfig
from proton_docs_mcp.models import NotificationEvent, NotificationLevel
from proton_docs_mcp.notifications.base import ConsoleNotifier
from proton_docs_mcp.orchestrator import ui_contract as ui
from proton_docs_mcp.orchestrator.pipeline import PipelineState
from proton_docs_mcp.orchestrator.runner import DocsOrchestrator

DOC_URL = "https://docs.proton.me/doc?mode=open&volumeId=v1&linkId=l1"


def build_console_orchestrator(session: FakeSession) -> tuple[DocsOrchestrator, Console]:
    config = ServerConfig()
    console = Console(record=True, width=200)
    notifier = ConsoleNotifier(console)
    sessions = SessionManager(config.browser, launcher=FakeLauncher(session), notifier=notifier)
    return DocsOrchestrator(config, sessions, notifier=notifier), console


def test_console_notifier_prints_brackets_verbatim():
    console = Console(record=True, width=200)
    notifier = ConsoleNotifier(console)

    notifier.notify(
        NotificationEvent(
            type="operation_failed",
            message='Element not found: button:has-text("[/b]") [data-testid="x"]',
            level=NotificationLevel.ERROR,
        )
    )

    output = console.export_text()
    assert '[ERROR] Element not found: button:has-text("[/b]") [data-testid="x"]' in output


@pytest.mark.asyncio
async def test_failure_with_closing_tag_text_still_yields_result():
    present = {ui.EDITOR_FRAME, ui.MAIN_EDITOR, ui.FONT_FAMILY_BUTTON}
    orchestrator, console = build_console_orchestrator(FakeSession(present=present))

    result = await orchestrator.run(
        "change_font", {"documentUrl": DOC_URL, "fontFamily": "[/b]"}
    )

    assert not result.ok
    assert result.error_code == "element_not_found"
    assert result.states[-1] is PipelineState.FAILED
    assert ui.menu_option("[/b]") in console.export_text()


@pytest.mark.asyncio
async def test_failure_output_keeps_the_locator():
    orchestrator, console = build_console_orchestrator(
        FakeSession(present={ui.EDITOR_FRAME})
    )

    result = await orchestrator.run("read_document", {"documentUrl": DOC_URL})

    assert result.error_code == "element_not_found"
    assert f"Element not found: {ui.MAIN_EDITOR}" in console.export_text()
