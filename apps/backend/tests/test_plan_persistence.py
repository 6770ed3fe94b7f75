import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from chatflow.planning.schema import ChatInteraction, PlanningTask
from chatflow.planning.store import DuplicateWorkflowError, PlanStore
from chatflow.workflow.persister import (
    PlanPersister,
    build_registry_record,
    build_review_tasks,
)
from chatflow.workflow.schema import WorkflowPlan
from chatflow.workflow.synthesizer import synthesize_graph

PLAN = WorkflowPlan.model_validate(
    {
        "name": "Issue digest",
        "description": "Daily digest of new issues",
        "triggers": ["schedule"],
        "steps": [
            {"id": "step_1", "name": "Fetch issues", "type": "http", "config": {"url": "https://x"}},
            {"id": "step_2", "name": "Summarize", "type": "ai", "config": {}},
            {"id": "step_3", "name": "Post", "type": "slack", "config": {"channel": "#ops"}},
        ],
        "expectedOutputs": ["slack message"],
    }
)


class ReviewChecklistTests(unittest.TestCase):
    def test_review_task_first_then_one_per_step(self):
        tasks = build_review_tasks(PLAN)

        self.assertEqual(len(tasks), len(PLAN.steps) + 1)
        review = tasks[0]
        self.assertEqual(review.title, "Review workflow: Issue digest")
        self.assertEqual(review.status, "in_progress")
        self.assertEqual(review.priority, 7)
        self.assertEqual(review.category, "workflow")
        self.assertEqual(review.metadata["workflow_plan"]["name"], "Issue digest")

        for task, step in zip(tasks[1:], PLAN.steps):
            self.assertEqual(task.title, f"Configure: {step.name}")
            self.assertEqual(task.status, "backlog")
            self.assertEqual(task.priority, 5)
            self.assertEqual(task.metadata["step_id"], step.id)
            self.assertEqual(task.metadata["step_name"], step.name)

    def test_plan_without_steps_gets_only_review_task(self):
        plan = WorkflowPlan(name="Empty", description="", triggers=[], steps=[])
        tasks = build_review_tasks(plan)
        self.assertEqual([t.title for t in tasks], ["Review workflow: Empty"])

    def test_registry_record_defaults_to_manual_trigger(self):
        plan = WorkflowPlan(name="No trigger", triggers=[])
        record = build_registry_record(plan, synthesize_graph(plan))
        self.assertEqual(record.trigger_type, "manual")
        self.assertEqual(record.status, "draft")
        self.assertEqual(record.related_tasks, [])
        self.assertFalse(record.config["active"])


class PlanStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp(prefix="chatflow-store-tests-"))
        self.store = PlanStore(self.tmp_dir / "planning.db")

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_persist_records_graph_and_links_tasks(self):
        graph = synthesize_graph(PLAN)
        persisted = PlanPersister(self.store).persist(PLAN, graph)

        record = self.store.get_workflow_by_name("Issue digest")
        self.assertIsNotNone(record)
        self.assertEqual(record.id, persisted.record.id)
        self.assertEqual(record.trigger_type, "schedule")
        self.assertEqual(record.status, "draft")
        self.assertEqual(record.config, graph.to_n8n())
        self.assertEqual(record.related_tasks, [t.id for t in persisted.tasks])

        tasks = self.store.list_tasks()
        self.assertEqual(len(tasks), 4)
        self.assertEqual(tasks[0].title, "Review workflow: Issue digest")
        self.assertEqual(
            [t.metadata.get("step_id") for t in tasks[1:]],
            ["step_1", "step_2", "step_3"],
        )

    def test_store_rejects_duplicate_workflow_name(self):
        graph = synthesize_graph(PLAN)
        self.store.insert_workflow(build_registry_record(PLAN, graph))

        with self.assertRaises(DuplicateWorkflowError):
            self.store.insert_workflow(build_registry_record(PLAN, graph))
        self.assertEqual(len(self.store.list_workflows()), 1)

    def test_persist_suffixes_duplicate_workflow_name(self):
        graph = synthesize_graph(PLAN)
        persister = PlanPersister(self.store)
        first = persister.persist(PLAN, graph)
        second = persister.persist(PLAN, graph)

        self.assertEqual(first.record.workflow_name, "Issue digest")
        self.assertEqual(
            second.record.workflow_name, f"Issue digest ({second.record.id[:8]})"
        )
        self.assertEqual(len(self.store.list_workflows()), 2)
        self.assertEqual(len(self.store.list_tasks()), 8)

        saved = self.store.get_workflow_by_name(second.record.workflow_name)
        self.assertEqual(saved.id, second.record.id)
        self.assertEqual(saved.related_tasks, [t.id for t in second.tasks])

    def test_list_tasks_filters_and_orders_by_priority(self):
        self.store.insert_task(PlanningTask(title="low", category="agent", priority=2))
        self.store.insert_task(
            PlanningTask(title="urgent", category="agent", priority=9, status="in_progress")
        )
        self.store.insert_task(PlanningTask(title="mid", category="integration", priority=5))

        self.assertEqual([t.title for t in self.store.list_tasks()], ["urgent", "mid", "low"])
        self.assertEqual([t.title for t in self.store.list_tasks("all")], ["urgent", "mid", "low"])
        self.assertEqual([t.title for t in self.store.list_tasks("backlog")], ["mid", "low"])
        self.assertEqual(self.store.list_tasks("done"), [])

    def test_store_survives_reopen(self):
        self.store.insert_task(PlanningTask(title="kept", category="workflow"))
        reopened = PlanStore(self.tmp_dir / "planning.db")
        self.assertEqual([t.title for t in reopened.list_tasks()], ["kept"])

    def test_link_tasks_on_missing_workflow(self):
        self.assertFalse(self.store.link_tasks("missing", ["t1"]))

    def test_recent_interactions_newest_first_per_session(self):
        for i, session in enumerate(["a", "b", "a"]):
            self.store.save_interaction(
                ChatInteraction(session_id=session, role="user", content=f"message {i}")
            )

        self.assertEqual(
            [m.content for m in self.store.recent_interactions("a")],
            ["message 2", "message 0"],
        )
        self.assertEqual(len(self.store.recent_interactions()), 3)
        self.assertEqual(len(self.store.recent_interactions(limit=1)), 1)

    def test_search_interactions_uses_full_text_index(self):
        self.store.save_interaction(
            ChatInteraction(session_id="s", role="user", content="Send the Slack digest every morning")
        )
        self.store.save_interaction(
            ChatInteraction(session_id="s", role="assistant", content="Invoices are synced hourly")
        )

        results = self.store.search_interactions("slack digest?")
        self.assertEqual([m.role for m in results], ["user"])
        self.assertEqual(self.store.search_interactions("!!!"), [])
        self.assertEqual(self.store.search_interactions("nothing-matches"), [])


if __name__ == "__main__":
    unittest.main()
