"""API tests for the LLM-backed routes; the model call is replaced per test."""

import json

import pytest

from voicepath.errors import LLMRateLimitError
from voicepath.extensions import db
from voicepath.models import Task
from voicepath.service import assistant as assistant_service
from voicepath.service import breakdown as breakdown_service
from voicepath.service import extraction as extraction_service

from .conftest import USER_ID


@pytest.fixture
def fake_llm(monkeypatch):
    """Patch ``invoke_prompt`` in every service module; returns the recorded calls."""
    calls = []
    replies = {"next": ""}

    def _invoke(template, variables, **kwargs):
        calls.append({"template": template, "variables": variables, **kwargs})
        reply = replies["next"]
        if isinstance(reply, Exception):
            raise reply
        return reply

    for module in (extraction_service, breakdown_service, assistant_service):
        monkeypatch.setattr(module, "invoke_prompt", _invoke)

    def _set(reply):
        replies["next"] = reply

    _set.calls = calls
    return _set


FLOWCHART_REPLY = "```json\n" + json.dumps([
    {"id": "1", "label": "Gather data", "context": "Collect Q3 numbers"},
    {"id": "2", "label": "Draft", "context": "Write sections"},
    {"id": "3", "label": "Review", "context": "Ask a peer"},
]) + "\n```"


class TestProcessVoiceTasks:
    def test_extracts_and_stores(self, app, client, fake_llm):
        fake_llm(json.dumps([
            {"task_name": "Call dad", "importance": "high", "duration": "short",
             "is_complete": False, "has_subtasks": False},
            {"task_name": "Clean garage", "importance": "whenever", "duration": "forever"},
        ]))
        resp = client.post("/api/process-voice-tasks", json={
            "transcribedText": "call mom, scratch that, call dad. and clean the garage",
            "userId": USER_ID,
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["extractedCount"] == 2
        assert body["message"] == "Successfully created 2 tasks from your voice note."
        assert [(t["task_name"], t["importance"], t["duration"]) for t in body["tasks"]] == [
            ("Call dad", "high", "short"),
            ("Clean garage", "medium", "medium"),
        ]
        assert fake_llm.calls[0]["variables"]["transcribed_text"].startswith("call mom")
        assert fake_llm.calls[0]["temperature"] == app.config["EXTRACTION_TEMPERATURE"]
        with app.app_context():
            assert Task.query.filter_by(user_id=USER_ID).count() == 2

    def test_no_tasks(self, client, fake_llm):
        fake_llm("[]")
        body = client.post("/api/process-voice-tasks", json={"transcribedText": "hmm", "userId": USER_ID}).get_json()
        assert body["tasks"] == []
        assert body["message"] == "No clear tasks were identified in the transcription."

    def test_missing_fields(self, client, fake_llm):
        assert client.post("/api/process-voice-tasks", json={"userId": USER_ID}).status_code == 400
        assert client.post("/api/process-voice-tasks", json={"transcribedText": "x"}).status_code == 400
        assert fake_llm.calls == []

    def test_invalid_json_reply(self, app, client, fake_llm):
        fake_llm("Sorry, I can't help with that")
        resp = client.post("/api/process-voice-tasks", json={"transcribedText": "x", "userId": USER_ID})
        assert resp.status_code == 500
        with app.app_context():
            assert Task.query.count() == 0

    def test_missing_task_name_is_error(self, app, client, fake_llm):
        fake_llm('[{"task_name": "ok"}, {"importance": "high"}]')
        resp = client.post("/api/process-voice-tasks", json={"transcribedText": "x", "userId": USER_ID})
        assert resp.status_code == 500
        with app.app_context():
            assert Task.query.count() == 0

    def test_rate_limited(self, client, fake_llm):
        fake_llm(LLMRateLimitError())
        resp = client.post("/api/process-voice-tasks", json={"transcribedText": "x", "userId": USER_ID})
        assert resp.status_code == 429
        assert resp.get_json() == {"error": "Rate limit exceeded. Please try again later."}


class TestGenerateFlowchart:
    def test_generates_and_saves(self, app, client, make_task, fake_llm):
        task_id = make_task(duration="long")
        fake_llm(FLOWCHART_REPLY)
        resp = client.post("/api/generate-flowchart", json={
            "taskId": task_id, "taskName": "Write report", "importance": "high", "duration": "long",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["generated"] is True
        assert body["saved"] is True
        assert [item["label"] for item in body["flowchart"]] == ["Gather data", "Draft", "Review"]
        assert len(body["flow"]["nodes"]) == 3
        assert len(body["flow"]["edges"]) == 2
        assert fake_llm.calls[0]["model_id"] == app.config["BEDROCK_MODEL_ID_LITE"]
        with app.app_context():
            task = db.session.get(Task, task_id)
            assert task.has_subtasks is True
            assert [(s.order_index, s.name) for s in task.subtasks] == [(1, "Gather data"), (2, "Draft"), (3, "Review")]

    def test_stored_subtasks_returned_without_model(self, client, make_task, fake_llm):
        task_id = make_task(subtasks=["A", "B", "C"])
        body = client.post("/api/generate-flowchart", json={"taskId": task_id, "taskName": "Report"}).get_json()
        assert body["fromDatabase"] is True
        assert body["flowchart"][1] == {"id": "2", "label": "B", "context": "Subtask 2 of Report"}
        assert fake_llm.calls == []

    def test_short_task_single_node(self, client, make_task, fake_llm):
        task_id = make_task(name="Email Bob", duration="short")
        body = client.post("/api/generate-flowchart", json={"taskId": task_id}).get_json()
        assert body["shortTask"] is True
        assert body["flowchart"] == [{
            "id": "1", "label": "Email Bob",
            "context": "This is a short task - no subtasks needed. Complete it directly!",
        }]
        assert fake_llm.calls == []

    def test_unknown_task(self, client, fake_llm):
        resp = client.post("/api/generate-flowchart", json={"taskId": 999})
        assert resp.status_code == 404

    def test_rate_limited(self, client, make_task, fake_llm):
        task_id = make_task()
        fake_llm(LLMRateLimitError())
        resp = client.post("/api/generate-flowchart", json={"taskId": task_id})
        assert resp.status_code == 429

    def test_save_failure_still_returns_flowchart(self, client, make_task, fake_llm, monkeypatch):
        from sqlalchemy.exc import OperationalError

        def _fail(task, labels):
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(breakdown_service.task_service, "save_flowchart_subtasks", _fail)
        task_id = make_task()
        fake_llm(FLOWCHART_REPLY)
        body = client.post("/api/generate-flowchart", json={"taskId": task_id}).get_json()
        assert body["saved"] is False
        assert len(body["flowchart"]) == 3

    def test_refine(self, client, fake_llm):
        fake_llm(FLOWCHART_REPLY)
        resp = client.post("/api/refine-flowchart", json={"prompt": "fewer meetings", "currentSteps": "1. Meet"})
        body = resp.get_json()
        assert [n["data"]["title"] for n in body["flow"]["nodes"]] == ["Gather data", "Draft", "Review"]
        assert fake_llm.calls[0]["variables"]["user_prompt"] == "fewer meetings"

    def test_refine_requires_prompt(self, client, fake_llm):
        assert client.post("/api/refine-flowchart", json={}).status_code == 400


class TestAssistant:
    def test_plain_prompt(self, client, fake_llm):
        fake_llm("Try the **smallest** next step.")
        resp = client.post("/api/unstuck-assistant", json={"userPrompt": "I'm stuck"})
        body = resp.get_json()
        assert body["response"] == "Try the **smallest** next step."
        assert "<strong>smallest</strong>" in body["response_html"]
        assert "TASK BREAKDOWN CONTEXT" not in fake_llm.calls[0]["variables"]["user_prompt"]

    def test_task_context_injected_and_history_saved(self, app, client, make_task, fake_llm):
        task_id = make_task(subtasks=["Gather data", "Draft", "Review"])
        fake_llm("Start with the data.")
        resp = client.post("/api/unstuck-assistant", json={
            "userPrompt": "Where do I start?", "taskId": task_id, "userId": USER_ID, "saveHistory": True,
        })
        assert resp.status_code == 200
        sent = fake_llm.calls[0]["variables"]["user_prompt"]
        assert sent.startswith("Where do I start?\n\nTASK BREAKDOWN CONTEXT:\n📋 TASK: Write report")
        assert "⏳ 1. Gather data" in sent
        with app.app_context():
            history = db.session.get(Task, task_id).chat_history
        assert history == [
            {"role": "user", "content": "Where do I start?"},
            {"role": "assistant", "content": "Start with the data."},
        ]

    def test_prompt_required(self, client, fake_llm):
        resp = client.post("/api/unstuck-assistant", json={})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "userPrompt is required"}

    def test_add_context(self, client, fake_llm):
        fake_llm("Check the shared drive\n\n  Ask finance for totals  ")
        resp = client.post("/api/add-context", json={
            "title": "Gather data", "details": "Collect Q3 numbers\n", "request": "where is the data?",
        })
        assert resp.get_json()["details"] == ["Collect Q3 numbers", "Check the shared drive", "Ask finance for totals"]
        prompt = fake_llm.calls[0]["variables"]["user_prompt"]
        assert "Title: Gather data" in prompt
        assert "User Request: where is the data?" in prompt

    def test_add_context_validation(self, client, fake_llm):
        assert client.post("/api/add-context", json={"title": "x"}).status_code == 400
