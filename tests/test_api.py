import json
import unittest
from unittest.mock import patch

import httpx
from fastapi import Depends, Request

from app.core.config import settings
from app.core.constants import GeneralErrorDetails
from app.core.exceptions import ModelUnavailableError
from app.core.handler import app_exception_handler
from app.core.dependencies import get_record_store, limiter
from app.main import app
from app.api.v1.endpoints.ai import get_correlation_analyzer
from app.api.v1.endpoints.conversations import get_message_service
from app.repositories.record_store import RecordStore
from app.services.chat_driver import ConversationalDriver
from app.services.context_builder import RelevanceContextBuilder
from app.services.correlation_analyzer import CorrelationAnalyzer
from app.services.correlation_pipeline import CorrelationDispatcher, get_correlation_dispatcher
from app.services.message_service import MessageService
from tests.helpers import (
    ACCOUNT_ID,
    OTHER_ACCOUNT_ID,
    DatabaseTestCase,
    completion,
    fake_openai,
    json_completion,
    tool_call,
)

HEADERS = {"X-Account-Id": ACCOUNT_ID}


class ApiTestCase(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        limiter.reset()
        self.dispatcher = CorrelationDispatcher(
            analyzer=CorrelationAnalyzer(client=fake_openai(completion("{malformed")))
        )
        app.dependency_overrides[get_correlation_dispatcher] = lambda: self.dispatcher
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def asyncTearDown(self):
        await self.dispatcher.drain()
        await self.client.aclose()
        app.dependency_overrides.clear()
        await super().asyncTearDown()


class TestAccountScoping(ApiTestCase):
    async def test_missing_account_header_is_401(self):
        response = await self.client.get("/api/v1/tasks")
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    async def test_unknown_account_is_401(self):
        response = await self.client.get("/api/v1/tasks", headers={"X-Account-Id": "nobody"})
        self.assertEqual(response.status_code, 401)

    async def test_foreign_record_is_404(self):
        foreign = await self.add_task("Private", account_id=OTHER_ACCOUNT_ID)
        response = await self.client.get(f"/api/v1/tasks/{foreign.id}", headers=HEADERS)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Task not found")


class TestGoalEndpoints(ApiTestCase):
    async def test_patch_progress_is_clamped(self):
        goal = await self.add_goal("Launch")

        high = await self.client.patch(f"/api/v1/goals/{goal.id}", json={"progress": 150}, headers=HEADERS)
        self.assertEqual(high.status_code, 200)
        self.assertEqual(high.json()["data"]["progress"], 100)

        low = await self.client.patch(f"/api/v1/goals/{goal.id}", json={"progress": -30}, headers=HEADERS)
        self.assertEqual(low.json()["data"]["progress"], 0)

    async def test_create_goal_stores_target_in_minor_units(self):
        response = await self.client.post(
            "/api/v1/goals",
            json={"title": "Q1 revenue", "type": "revenue", "category": "sales", "target_amount": 100000},
            headers=HEADERS,
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["target_amount"], 10_000_000)

    async def test_target_goal_starts_at_derived_progress(self):
        await self.add_record("revenue", 2_500_000)
        response = await self.client.post(
            "/api/v1/goals",
            json={"title": "Q1 revenue", "type": "revenue", "category": "sales", "target_amount": 100000},
            headers=HEADERS,
        )
        self.assertEqual(response.json()["data"]["progress"], 25)

    async def test_changing_target_recomputes_progress(self):
        await self.add_record("revenue", 2_500_000)
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)

        response = await self.client.patch(f"/api/v1/goals/{goal.id}", json={"target_amount": 50000}, headers=HEADERS)

        self.assertEqual(response.json()["data"]["progress"], 50)
        self.assertEqual((await self.reload("goals", goal.id)).progress, 50)


class TestFinancialRecordEndpoints(ApiTestCase):
    async def test_create_succeeds_despite_malformed_analysis(self):
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)

        response = await self.client.post(
            "/api/v1/financial-records",
            json={"type": "revenue", "category": "consulting", "amount": 60000, "date": "2026-02-01T00:00:00Z"},
            headers=HEADERS,
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["amount"], 6_000_000)

        await self.dispatcher.drain()
        self.assertEqual((await self.reload("goals", goal.id)).progress, 60)

    async def test_amount_below_one_cent_is_422(self):
        response = await self.client.post(
            "/api/v1/financial-records",
            json={"type": "expense", "category": "rent", "amount": 0, "date": "2026-02-01T00:00:00Z"},
            headers=HEADERS,
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("validation_errors", response.json()["data"])

    async def test_delete_recomputes_goal_progress(self):
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000, progress=90)
        await self.add_record("revenue", 4_000_000)
        doomed = await self.add_record("revenue", 5_000_000)

        response = await self.client.delete(f"/api/v1/financial-records/{doomed.id}", headers=HEADERS)

        self.assertEqual(response.status_code, 200)
        self.assertEqual((await self.reload("goals", goal.id)).progress, 40)


class TestMessageEndpoints(ApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.topic_client = fake_openai(completion("launch"))
        self.chat_client = fake_openai()

        async def message_service(store: RecordStore = Depends(get_record_store)):
            return MessageService(
                store,
                context_builder=RelevanceContextBuilder(store, client=self.topic_client),
                driver=ConversationalDriver(client=self.chat_client),
                dispatcher=self.dispatcher,
            )

        app.dependency_overrides[get_message_service] = message_service

        conversation = await self.store.conversations.create(ACCOUNT_ID, {})
        await self.session.commit()
        self.conversation_id = conversation.id

    async def test_reply_applies_actions_and_retitles(self):
        goal = await self.add_goal("Product launch", progress=10)
        self.chat_client.chat.completions.create.side_effect = [completion(
            content=None,
            tool_calls=[tool_call("update_goal_progress", {"goalId": goal.id, "progress": 250})],
        )]
        content = "We shipped the beta to every customer, please bump the launch goal to reflect it"

        response = await self.client.post(
            "/api/v1/messages",
            json={"conversation_id": self.conversation_id, "content": content},
            headers=HEADERS,
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["user_message"]["content"], content)
        self.assertEqual(data["ai_message"]["role"], "assistant")
        self.assertEqual(data["ai_message"]["content"], f"Updated goal #{goal.id} \"Product launch\" progress to 100%.")
        self.assertIsNone(data["error"])

        self.assertEqual((await self.reload("goals", goal.id)).progress, 100)
        conversation = await self.reload("conversations", self.conversation_id)
        self.assertEqual(conversation.title, content[:50] + "...")

        prompt = self.chat_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        self.assertIn("Product launch", prompt)

    async def test_model_failure_keeps_user_message(self):
        self.chat_client.chat.completions.create.side_effect = RuntimeError("upstream 500")

        response = await self.client.post(
            "/api/v1/messages",
            json={"conversation_id": self.conversation_id, "content": "How are we doing?"},
            headers=HEADERS,
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertIsNone(body["data"]["ai_message"])
        self.assertEqual(body["data"]["error"], "Failed to generate AI response")

        history = await self.client.get(f"/api/v1/messages/{self.conversation_id}", headers=HEADERS)
        self.assertEqual([m["content"] for m in history.json()["data"]], ["How are we doing?"])

    async def test_ai_created_financial_record_dispatches_correlation(self):
        self.chat_client.chat.completions.create.side_effect = [completion(
            content="Recorded.",
            tool_calls=[tool_call("create_financial_record", {
                "type": "expense", "category": "rent", "amount": 1500.5, "date": "2026-02-01T00:00:00Z",
            })],
        )]

        with patch.object(settings, "ASSISTANT_CREATE_ACTIONS_ENABLED", True):
            response = await self.client.post(
                "/api/v1/messages",
                json={"conversation_id": self.conversation_id, "content": "Paid rent of $1500.50"},
                headers=HEADERS,
            )
        self.assertEqual(response.status_code, 200)
        await self.dispatcher.drain()

        listing = await self.client.get("/api/v1/financial-records", headers=HEADERS)
        self.assertEqual([r["amount"] for r in listing.json()["data"]], [150050])
        self.dispatcher.analyzer.client.chat.completions.create.assert_awaited_once()

    async def test_confirmation_lists_only_applied_actions(self):
        goal = await self.add_goal("Product launch")
        self.chat_client.chat.completions.create.side_effect = [completion(
            content=None,
            tool_calls=[
                tool_call("update_task_status", {"taskId": 9999, "status": "completed"}, "call_1"),
                tool_call("update_goal_progress", {"goalId": goal.id, "progress": 250}, "call_2"),
            ],
        )]

        response = await self.client.post(
            "/api/v1/messages",
            json={"conversation_id": self.conversation_id, "content": "Close task 9999 and finish the launch"},
            headers=HEADERS,
        )

        reply = response.json()["data"]["ai_message"]["content"]
        self.assertNotIn("Updated task #9999", reply)
        self.assertIn("Could not apply update_task_status: Task not found.", reply)
        self.assertIn(f"Updated goal #{goal.id} \"Product launch\" progress to 100%.", reply)
        self.assertNotIn("250", reply)

    async def test_unknown_conversation_is_404(self):
        response = await self.client.post(
            "/api/v1/messages",
            json={"conversation_id": 9999, "content": "hi"},
            headers=HEADERS,
        )
        self.assertEqual(response.status_code, 404)


class TestAiActionEndpoints(ApiTestCase):
    async def test_goal_progress_is_clamped(self):
        goal = await self.add_goal("Launch", progress=20)

        high = await self.client.post(
            "/api/v1/ai/update-goal-progress", json={"goalId": goal.id, "progress": 250}, headers=HEADERS
        )
        self.assertEqual(high.status_code, 200)
        self.assertEqual(high.json()["data"]["progress"], 100)

        low = await self.client.post(
            "/api/v1/ai/update-goal-progress", json={"goalId": goal.id, "progress": -30}, headers=HEADERS
        )
        self.assertEqual(low.json()["data"]["progress"], 0)
        self.assertEqual((await self.reload("goals", goal.id)).progress, 0)

    async def test_task_status_update(self):
        task = await self.add_task("Send invoice")
        response = await self.client.post(
            "/api/v1/ai/update-task-status", json={"taskId": task.id, "status": "completed"}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["status"], "completed")

    async def test_invalid_status_is_422(self):
        task = await self.add_task("Send invoice")
        response = await self.client.post(
            "/api/v1/ai/update-task-status", json={"taskId": task.id, "status": "archived"}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual((await self.reload("tasks", task.id)).status, "pending")

    async def test_foreign_goal_is_404(self):
        foreign = await self.add_goal("Theirs", account_id=OTHER_ACCOUNT_ID, progress=5)
        response = await self.client.post(
            "/api/v1/ai/update-goal-progress", json={"goalId": foreign.id, "progress": 90}, headers=HEADERS
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Goal not found")
        self.assertEqual((await self.reload("goals", foreign.id, account_id=OTHER_ACCOUNT_ID)).progress, 5)


class TestCorrelationEndpoint(ApiTestCase):
    def use_analyzer(self, *responses):
        analyzer = CorrelationAnalyzer(client=fake_openai(*responses))
        app.dependency_overrides[get_correlation_analyzer] = lambda: analyzer
        return analyzer

    async def test_returns_analysis_without_applying_it(self):
        task = await self.add_task("Chase payment")
        record = await self.add_record("revenue", 500_000, category="consulting")
        self.use_analyzer(json_completion({
            "businessInsights": ["Consulting is growing"],
            "taskUpdates": [{"taskId": task.id, "newStatus": "completed", "reason": "Paid"}],
        }))

        response = await self.client.get(f"/api/v1/ai/correlations/{record.id}", headers=HEADERS)

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["businessInsights"], ["Consulting is growing"])
        self.assertEqual(data["taskUpdates"][0]["taskId"], task.id)
        self.assertEqual((await self.reload("tasks", task.id)).status, "pending")

    async def test_model_failure_gives_empty_result(self):
        record = await self.add_record("expense", 10_000)
        self.use_analyzer(completion("{malformed"))

        response = await self.client.get(f"/api/v1/ai/correlations/{record.id}", headers=HEADERS)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["progressUpdates"], [])

    async def test_foreign_record_is_404(self):
        record = await self.add_record("revenue", 10_000, account_id=OTHER_ACCOUNT_ID)
        self.use_analyzer()
        response = await self.client.get(f"/api/v1/ai/correlations/{record.id}", headers=HEADERS)
        self.assertEqual(response.status_code, 404)


class TestErrorResponses(ApiTestCase):
    async def test_message_rate_limit_sets_retry_after(self):
        with patch.object(settings, "MESSAGE_RATE_LIMIT_PER_MINUTE", 1):
            first = await self.client.post(
                "/api/v1/messages", json={"conversation_id": 9999, "content": "hi"}, headers=HEADERS
            )
            second = await self.client.post(
                "/api/v1/messages", json={"conversation_id": 9999, "content": "hi"}, headers=HEADERS
            )

        self.assertEqual(first.status_code, 404)
        self.assertEqual(second.status_code, 429)
        self.assertEqual(second.headers["Retry-After"], "60")
        self.assertEqual(second.json()["message"], GeneralErrorDetails.RATE_LIMIT_EXCEEDED)

    async def test_validation_errors_name_the_body_field(self):
        response = await self.client.post(
            "/api/v1/ai/update-task-status", json={"taskId": 1, "status": "archived"}, headers=HEADERS
        )
        fields = [e["field"] for e in response.json()["data"]["validation_errors"]]
        self.assertEqual(fields, ["status"])

    async def test_model_outage_asks_client_to_retry(self):
        request = Request({"type": "http", "method": "POST", "path": "/api/v1/messages", "headers": [], "query_string": b""})
        response = await app_exception_handler(request, ModelUnavailableError(message="Model returned no choices"))

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.headers["Retry-After"], "30")
        self.assertEqual(json.loads(response.body)["message"], "Model returned no choices")

    async def test_not_found_has_no_retry_after(self):
        response = await self.client.get("/api/v1/goals/9999", headers=HEADERS)
        self.assertEqual(response.status_code, 404)
        self.assertNotIn("Retry-After", response.headers)


class TestInsightEndpoints(ApiTestCase):
    async def test_stats(self):
        await self.add_goal("A", status="active")
        await self.add_goal("B", status="completed")
        response = await self.client.get("/api/v1/stats", headers=HEADERS)
        self.assertEqual(response.json()["data"], {
            "documents_processed": 0,
            "active_goals": 1,
            "insights_generated": 0,
            "total_documents": 0,
            "completed_goals": 1,
        })

    async def test_business_summary_degrades_to_empty_lists(self):
        with patch("app.services.insights_service.get_openai_client",
                   return_value=fake_openai(error=RuntimeError("no key"))):
            response = await self.client.get("/api/v1/insights/business", headers=HEADERS)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], {
            "insights": [], "financialTrends": [], "goalAlignment": [], "recommendations": [],
        })


if __name__ == "__main__":
    unittest.main()
