"""
Unit tests for the action dispatcher.
"""

import pytest

from conftest import WORK_ID, pull_request_event, push_event

from works_bridge.models.action import ActionName, ActionRequest
from works_bridge.models.event import EventContext
from works_bridge.models.outputs import WorkStatus
from works_bridge.services.dispatcher import (
    ActionDispatcher,
    MissingIdentifierError,
    ResolvedContext,
    UnknownActionError,
    parse_files,
    parse_progress,
    plan_call,
    resolve_work_id,
)
from works_bridge.services.event_classifier import classify_event
from works_bridge.services.mcp_client import McpClient, RemoteError, TransportError
from works_bridge.services.outputs import InMemoryOutputSink


OTHER_ID = "abcdefghij0123456789xyz"


@pytest.fixture
def outputs() -> InMemoryOutputSink:
    return InMemoryOutputSink()


@pytest.fixture
def dispatcher(mcp_client, outputs) -> ActionDispatcher:
    return ActionDispatcher(mcp_client, outputs)


class TestSync:
    """Tests for the sync action."""

    @pytest.mark.asyncio
    async def test_merged_pull_request_marks_complete(self, dispatcher, works_server, outputs):
        event = pull_request_event(number=42, title=f"Add X [{WORK_ID}]", merged=True)

        result = await dispatcher.run(ActionRequest(action="sync"), event)

        assert works_server.tool_calls == [(
            "mark_complete",
            {
                "workId": WORK_ID,
                "summary": f"Merged PR #42: Add X [{WORK_ID}]",
                "files": [],
                "pullRequestUrl": "https://github.test/acme/repo/pull/42",
            },
        )]
        assert outputs.values == {"work-id": WORK_ID, "status": "COMPLETED"}
        assert result.outputs.status is WorkStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_merged_pull_request_summary_with_explicit_id(self, dispatcher, works_server):
        event = pull_request_event(number=42, title="Add X", merged=True)

        await dispatcher.run(ActionRequest(action="sync", work_id=WORK_ID), event)

        name, arguments = works_server.tool_calls[0]
        assert name == "mark_complete"
        assert arguments["summary"] == "Merged PR #42: Add X"

    @pytest.mark.asyncio
    async def test_merged_pull_request_passes_files(self, dispatcher, works_server):
        event = pull_request_event(merged=True)
        request = ActionRequest(action="sync", work_id=WORK_ID, files=" src/a.py , src/b.py,")

        await dispatcher.run(request, event)

        assert works_server.tool_calls[0][1]["files"] == ["src/a.py", "src/b.py"]

    @pytest.mark.asyncio
    async def test_open_pull_request_reports_progress(self, dispatcher, works_server, outputs):
        event = pull_request_event(number=7, title="WIP", body=f"Implements [WORK-{WORK_ID}]")

        await dispatcher.run(ActionRequest(action="sync"), event)

        assert works_server.tool_calls == [(
            "report_progress",
            {"workId": WORK_ID, "progress": 75, "message": "PR #7 opened: WIP"},
        )]
        assert outputs.values == {"work-id": WORK_ID, "status": "IN_PROGRESS"}

    @pytest.mark.asyncio
    async def test_pull_request_title_checked_before_body(self, dispatcher, works_server):
        event = pull_request_event(title=f"[{WORK_ID}] title", body=f"[{OTHER_ID}] body")

        result = await dispatcher.run(ActionRequest(action="sync"), event)

        assert result.work_id == WORK_ID

    @pytest.mark.asyncio
    async def test_push_reports_commit_count(self, dispatcher, works_server, outputs):
        event = push_event("chore: deps", f"feat: login [{WORK_ID}]", "docs")

        await dispatcher.run(ActionRequest(action="sync"), event)

        assert works_server.tool_calls == [(
            "report_progress",
            {"workId": WORK_ID, "progress": 50, "message": "3 commit(s) pushed"},
        )]
        assert outputs.values == {"work-id": WORK_ID, "status": "IN_PROGRESS"}

    @pytest.mark.asyncio
    async def test_push_first_commit_hit_wins(self, dispatcher):
        event = push_event(f"[{OTHER_ID}]", f"[{WORK_ID}]")

        result = await dispatcher.run(ActionRequest(action="sync"), event)

        assert result.work_id == OTHER_ID

    @pytest.mark.asyncio
    async def test_push_without_id_does_nothing(self, dispatcher, works_server, outputs):
        event = push_event("fix typo", "refactor")

        result = await dispatcher.run(ActionRequest(action="sync"), event)

        assert works_server.requests == []
        assert outputs.values == {"work-id": ""}
        assert result.planned_call is None
        assert result.outputs.status is None

    @pytest.mark.asyncio
    async def test_other_event_with_explicit_id_does_nothing(self, dispatcher, works_server, outputs):
        event = EventContext(event_name="issues", payload={"issue": {"number": 3}})

        await dispatcher.run(ActionRequest(action="sync", work_id=WORK_ID), event)

        assert works_server.requests == []
        assert outputs.values == {"work-id": WORK_ID}

    @pytest.mark.asyncio
    async def test_explicit_id_overrides_detected(self, dispatcher, works_server):
        event = push_event(f"[{OTHER_ID}]")

        await dispatcher.run(ActionRequest(action="sync", work_id=WORK_ID), event)

        assert works_server.tool_calls[0][1]["workId"] == WORK_ID


class TestComplete:
    """Tests for the complete action."""

    @pytest.mark.asyncio
    async def test_missing_id_fails_without_call(self, dispatcher, works_server, outputs):
        with pytest.raises(MissingIdentifierError, match="No work ID provided or detected"):
            await dispatcher.run(ActionRequest(action="complete"), push_event("no id"))

        assert works_server.requests == []
        assert outputs.values == {}

    @pytest.mark.asyncio
    async def test_defaults_omit_files_and_url(self, dispatcher, works_server, outputs):
        await dispatcher.run(ActionRequest(action="complete", work_id=WORK_ID), push_event("x"))

        assert works_server.tool_calls == [(
            "mark_complete",
            {"workId": WORK_ID, "summary": "Completed via GitHub Action"},
        )]
        assert outputs.values == {"work-id": WORK_ID, "status": "COMPLETED"}

    @pytest.mark.asyncio
    async def test_pull_request_url_and_files(self, dispatcher, works_server):
        request = ActionRequest(
            action="complete",
            summary="Shipped login flow",
            files="src/login.py, tests/test_login.py",
        )
        event = pull_request_event(title=f"[{WORK_ID}] Login")

        await dispatcher.run(request, event)

        assert works_server.tool_calls == [(
            "mark_complete",
            {
                "workId": WORK_ID,
                "summary": "Shipped login flow",
                "files": ["src/login.py", "tests/test_login.py"],
                "pullRequestUrl": "https://github.test/acme/repo/pull/42",
            },
        )]


class TestProgress:
    """Tests for the progress action."""

    @pytest.mark.asyncio
    async def test_parses_progress_input(self, dispatcher, works_server, outputs):
        request = ActionRequest(action="progress", work_id=WORK_ID, progress="30", summary="Tests green")

        await dispatcher.run(request, EventContext(event_name="workflow_run"))

        assert works_server.tool_calls == [(
            "report_progress",
            {"workId": WORK_ID, "progress": 30, "message": "Tests green"},
        )]
        assert outputs.values == {"work-id": WORK_ID, "status": "IN_PROGRESS"}

    @pytest.mark.asyncio
    async def test_defaults(self, dispatcher, works_server):
        await dispatcher.run(ActionRequest(action="progress", work_id=WORK_ID), EventContext())

        assert works_server.tool_calls[0][1] == {
            "workId": WORK_ID,
            "progress": 50,
            "message": "Progress update from CI",
        }

    @pytest.mark.asyncio
    async def test_invalid_progress_falls_back(self, dispatcher, works_server):
        request = ActionRequest(action="progress", work_id=WORK_ID, progress="almost done")

        await dispatcher.run(request, EventContext())

        assert works_server.tool_calls[0][1]["progress"] == 50


class TestInit:
    """Tests for the init action."""

    @pytest.mark.asyncio
    async def test_emits_raw_agents_md(self, dispatcher, works_server, outputs):
        agents_md = "# AGENTS.md\n\n## Task\nBuild the login flow\n"
        works_server.reply_result({
            "structuredContent": {"ignored": True},
            "content": [{"type": "text", "text": agents_md}],
        })

        result = await dispatcher.run(ActionRequest(action="init", work_id=WORK_ID), EventContext())

        assert works_server.bodies[0]["method"] == "tools/call"
        assert works_server.tool_calls == [("get_work_context", {"workId": WORK_ID})]
        assert outputs.values == {"work-id": WORK_ID, "agents-md": agents_md}
        assert result.outputs.status is None

    @pytest.mark.asyncio
    async def test_json_text_is_not_parsed(self, dispatcher, works_server, outputs):
        works_server.reply_result({"content": [{"type": "text", "text": '{"a": 1}'}]})

        await dispatcher.run(ActionRequest(action="init", work_id=WORK_ID), EventContext())

        assert outputs.values["agents-md"] == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_missing_text_yields_empty_output(self, dispatcher, works_server, outputs):
        works_server.reply_result({"content": []})

        await dispatcher.run(ActionRequest(action="init", work_id=WORK_ID), EventContext())

        assert outputs.values["agents-md"] == ""


class TestFailures:
    """Tests for failure paths."""

    @pytest.mark.asyncio
    async def test_unknown_action(self, dispatcher, works_server, outputs):
        with pytest.raises(UnknownActionError, match="Unknown action: deploy"):
            await dispatcher.run(ActionRequest(action="deploy", work_id=WORK_ID), EventContext())

        assert works_server.requests == []
        assert outputs.values == {}

    @pytest.mark.asyncio
    async def test_unknown_action_without_id_reports_missing_id(self, dispatcher):
        with pytest.raises(MissingIdentifierError):
            await dispatcher.run(ActionRequest(action="deploy"), EventContext())

    @pytest.mark.asyncio
    async def test_remote_error_keeps_only_work_id(self, dispatcher, works_server, outputs):
        works_server.reply_error("Work item is already complete")

        with pytest.raises(RemoteError, match="Work item is already complete"):
            await dispatcher.run(ActionRequest(action="complete", work_id=WORK_ID), EventContext())

        assert outputs.values == {"work-id": WORK_ID}

    @pytest.mark.asyncio
    async def test_transport_error(self, dispatcher, works_server, outputs):
        works_server.status_code = 401

        with pytest.raises(TransportError, match="HTTP error: 401"):
            await dispatcher.run(ActionRequest(action="progress", work_id=WORK_ID), EventContext())

        assert outputs.values == {"work-id": WORK_ID}


@pytest.mark.asyncio
async def test_identical_inputs_yield_identical_calls(http_client, works_server):
    request = ActionRequest(action="sync")
    event = push_event(f"[{WORK_ID}] one", "two")

    first_outputs = InMemoryOutputSink()
    second_outputs = InMemoryOutputSink()
    await ActionDispatcher(McpClient("https://works.test", http_client=http_client), first_outputs).run(request, event)
    await ActionDispatcher(McpClient("https://works.test", http_client=http_client), second_outputs).run(request, event)

    assert works_server.bodies[0] == works_server.bodies[1]
    assert first_outputs.values == second_outputs.values


class TestPlanning:
    """Tests for the pure planning helpers."""

    def test_plan_sync_without_context(self):
        event = EventContext(event_name="issues")
        context = ResolvedContext(
            request=ActionRequest(action="sync"),
            event=event,
            view=classify_event(event),
            work_id=WORK_ID,
        )

        assert plan_call(ActionName.SYNC, context) is None

    def test_plan_init_is_context_call(self):
        context = ResolvedContext(request=ActionRequest(action="init"), event=EventContext(), work_id=WORK_ID)

        planned = plan_call(ActionName.INIT, context)

        assert planned.kind == "context"
        assert planned.params() == {"name": "get_work_context", "arguments": {"workId": WORK_ID}}
        assert planned.status is None

    def test_resolve_work_id_without_view(self):
        assert resolve_work_id(ActionRequest(action="sync"), None) == ""

    @pytest.mark.parametrize("value,expected", [
        (None, 50),
        ("", 50),
        ("  ", 50),
        ("30", 30),
        (" 80 ", 80),
        ("45%", 45),
        ("-5", -5),
        ("abc", 50),
    ])
    def test_parse_progress(self, value, expected):
        assert parse_progress(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (None, []),
        ("", []),
        ("a.py", ["a.py"]),
        ("a.py, b.py ,c.py", ["a.py", "b.py", "c.py"]),
        (" , ", []),
    ])
    def test_parse_files(self, value, expected):
        assert parse_files(value) == expected
