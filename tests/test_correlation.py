import unittest
from unittest.mock import patch

from app.core.config import settings
from app.schemas.correlation import CorrelationResult
from app.services.correlation_analyzer import CorrelationAnalyzer
from app.services.correlation_pipeline import CorrelationDispatcher, run_correlation
from tests.helpers import ACCOUNT_ID, DatabaseTestCase, completion, fake_openai, json_completion


def _analysis(**overrides):
    payload = {
        "correlations": [],
        "businessInsights": [],
        "recommendedActions": [],
        "progressUpdates": [],
        "taskUpdates": [],
    }
    payload.update(overrides)
    return payload


class TestCorrelationAnalyzer(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.record = await self.add_record("revenue", 250_000, category="consulting")

    async def analyze(self, client):
        return await CorrelationAnalyzer(client=client).analyze(self.record, [], [], [self.record])

    async def test_malformed_json_gives_empty_result(self):
        result = await self.analyze(fake_openai(completion("{not valid json")))
        self.assertTrue(result.is_empty())
        self.assertEqual(result, CorrelationResult.empty())

    async def test_schema_violation_gives_empty_result(self):
        result = await self.analyze(fake_openai(json_completion(_analysis(
            taskUpdates=[{"taskId": 1, "newStatus": "archived", "reason": "?"}],
        ))))
        self.assertTrue(result.is_empty())

    async def test_transport_error_gives_empty_result(self):
        result = await self.analyze(fake_openai(error=TimeoutError("slow")))
        self.assertTrue(result.is_empty())

    async def test_valid_reply_is_parsed(self):
        client = fake_openai(json_completion(_analysis(
            correlations=[{
                "financialRecordId": self.record.id,
                "relatedGoals": [1],
                "relatedTasks": [],
                "confidence": 0.8,
                "reasoning": "Consulting revenue",
                "suggestedActions": [],
            }],
            businessInsights=["Consulting is growing"],
        )))
        result = await self.analyze(client)

        self.assertEqual(result.correlations[0].related_goals, [1])
        self.assertEqual(result.business_insights, ["Consulting is growing"])

        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["response_format"], {"type": "json_object"})
        self.assertIn("Amount: $2,500.00", kwargs["messages"][1]["content"])


class TestCorrelationPipeline(DatabaseTestCase):
    async def test_target_bearing_goal_ignores_model_proposal(self):
        target_goal = await self.add_goal(
            "Q1 revenue", type="revenue", category="sales", target_amount=10_000_000
        )
        soft_goal = await self.add_goal("Brand awareness", type="other", category="marketing", progress=5)
        task = await self.add_task("Send invoice")
        record = await self.add_record("revenue", 6_000_000)

        analyzer = CorrelationAnalyzer(client=fake_openai(json_completion(_analysis(
            progressUpdates=[
                {"goalId": target_goal.id, "newProgress": 95, "reason": "looks close"},
                {"goalId": soft_goal.id, "newProgress": 130, "reason": "viral post"},
            ],
            taskUpdates=[{"taskId": task.id, "newStatus": "completed", "reason": "paid"}],
        ))))

        await run_correlation(ACCOUNT_ID, record.id, analyzer)

        self.assertEqual((await self.reload("goals", target_goal.id)).progress, 60)
        self.assertEqual((await self.reload("goals", soft_goal.id)).progress, 100)
        self.assertEqual((await self.reload("tasks", task.id)).status, "completed")

    async def test_analyzer_failure_still_recomputes(self):
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)
        record = await self.add_record("revenue", 2_500_000)

        analyzer = CorrelationAnalyzer(client=fake_openai(completion("garbage")))
        await run_correlation(ACCOUNT_ID, record.id, analyzer)

        self.assertEqual((await self.reload("goals", goal.id)).progress, 25)

    async def test_missing_record_is_logged_not_raised(self):
        analyzer = CorrelationAnalyzer(client=fake_openai())
        with self.assertLogs("correlation_pipeline", level="WARNING"):
            await run_correlation(ACCOUNT_ID, 424242, analyzer)
        analyzer.client.chat.completions.create.assert_not_called()

    async def test_dispatcher_runs_in_background_and_drains(self):
        goal = await self.add_goal("Q1 revenue", type="revenue", category="sales", target_amount=10_000_000)
        record = await self.add_record("revenue", 6_000_000)
        dispatcher = CorrelationDispatcher(
            analyzer=CorrelationAnalyzer(client=fake_openai(json_completion(_analysis())))
        )

        with patch.object(settings, "CORRELATION_ENABLED", True):
            task = dispatcher.dispatch(ACCOUNT_ID, record.id)
        self.assertIsNotNone(task)
        await dispatcher.drain()

        self.assertEqual(dispatcher.background_tasks, set())
        self.assertEqual((await self.reload("goals", goal.id)).progress, 60)

    async def test_dispatch_disabled(self):
        dispatcher = CorrelationDispatcher(analyzer=CorrelationAnalyzer(client=fake_openai()))
        with patch.object(settings, "CORRELATION_ENABLED", False):
            self.assertIsNone(dispatcher.dispatch(ACCOUNT_ID, 1))


if __name__ == "__main__":
    unittest.main()
