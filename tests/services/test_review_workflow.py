"""
Tests for the registration review workflow and the pending registration store.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app.ai_core.llm import ChatBackend
from app.ai_core.review import KnowledgeReviewer, ReviewError
from app.models.registration import (
    PendingRegistration,
    RegistrationChoice,
    RegistrationStatus,
)
from app.models.team import SectionKind
from app.services.document_store import DocumentNotFoundError, KnowledgeDocumentStore
from app.services.review_workflow import (
    PendingRegistrationStore,
    RegistrationReviewWorkflow,
    new_action_id,
)
from app.services.team_directory import TeamDirectory
from tests.fakes import (
    FakeChatModel,
    REVIEW_WITH_IMPROVEMENT,
    REVIEW_WITHOUT_IMPROVEMENT,
    write_knowledge_root,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_pending(action_id: str, **overrides) -> PendingRegistration:
    values = dict(
        action_id=action_id,
        team_key="마케팅",
        kind=SectionKind.LEARNING,
        original="원본",
        user_id="U1",
        channel_id="C1",
        thread_ts="1.0",
    )
    values.update(overrides)
    return PendingRegistration(**values)


class TestPendingRegistrationStore:
    """Test suite for TTL and capacity bounds."""

    def test_put_get_pop(self):
        store = PendingRegistrationStore()
        store.put(make_pending("a"))

        assert store.get("a").original == "원본"
        assert "a" in store
        assert store.pop("a").action_id == "a"
        assert store.pop("a") is None
        assert len(store) == 0

    def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        store = PendingRegistrationStore(ttl_seconds=60, clock=clock)
        store.put(make_pending("a"))

        clock.now += 59
        assert store.get("a") is not None

        clock.now += 1
        assert store.get("a") is None
        assert store.pop("a") is None

    def test_capacity_drops_oldest(self):
        store = PendingRegistrationStore(max_entries=2, clock=FakeClock())
        for action_id in ["a", "b", "c"]:
            store.put(make_pending(action_id))

        assert "a" not in store
        assert "b" in store and "c" in store
        assert len(store) == 2


def test_new_action_id_format():
    action_id = new_action_id()

    assert action_id.startswith("review_")
    assert action_id[len("review_"):].isdigit()


@pytest.fixture
def documents(tmp_path):
    write_knowledge_root(tmp_path)
    return KnowledgeDocumentStore(tmp_path, TeamDirectory())


def make_workflow(documents, response=REVIEW_WITH_IMPROVEMENT, error=None, **store_kwargs):
    model = FakeChatModel(response=response, error=error)
    reviewer = KnowledgeReviewer(ChatBackend(model))
    ids = iter(f"review_{i}" for i in range(1, 100))
    workflow = RegistrationReviewWorkflow(
        documents,
        reviewer,
        PendingRegistrationStore(**store_kwargs),
        id_factory=lambda: next(ids),
    )
    return workflow, model


def submit(workflow, content="CTR 높은 방법", kind=SectionKind.LEARNING, team="마케팅"):
    return asyncio.run(
        workflow.submit(
            team_key=team,
            kind=kind,
            content=content,
            user_id="U1",
            channel_id="C1",
            thread_ts="1.0",
        )
    )


def learning_items(documents):
    return asyncio.run(documents.list_items("마케팅", SectionKind.LEARNING))


class TestRegistrationReviewWorkflow:
    """Test suite for the registration state machine."""

    def test_submit_parks_pending_entry(self, documents):
        workflow, model = make_workflow(documents)

        prompt = submit(workflow)

        assert prompt.action_id == "review_1"
        assert prompt.has_improvement
        assert prompt.review.improved == "썸네일에 숫자를 넣으면 CTR이 높아진다"
        assert workflow.begin_edit("review_1").original == "CTR 높은 방법"
        # The team document is the system prompt of the review call
        assert "식약처 광고 심의 기준 준수" in model.calls[0][0].content

    def test_submit_without_improvement(self, documents):
        workflow, _ = make_workflow(documents, response=REVIEW_WITHOUT_IMPROVEMENT)

        prompt = submit(workflow)

        assert not prompt.has_improvement
        assert workflow.begin_edit(prompt.action_id).improved is None

    def test_submit_missing_document(self, documents):
        workflow, _ = make_workflow(documents)

        with pytest.raises(DocumentNotFoundError):
            submit(workflow, team="개발")
        assert len(workflow.pending) == 0

    def test_submit_review_failure(self, documents):
        workflow, _ = make_workflow(documents, error=RuntimeError("proxy down"))

        with pytest.raises(ReviewError):
            submit(workflow)
        assert len(workflow.pending) == 0

    def test_register_original(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        outcome = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL))

        assert outcome.status == RegistrationStatus.REGISTERED
        assert outcome.content == "CTR 높은 방법"
        assert outcome.consumed
        assert learning_items(documents) == ["CTR 높은 방법"]

    def test_register_improved(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        outcome = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.IMPROVED))

        assert outcome.status == RegistrationStatus.REGISTERED
        assert learning_items(documents) == ["썸네일에 숫자를 넣으면 CTR이 높아진다"]

    def test_improved_without_improvement_keeps_pending(self, documents):
        workflow, _ = make_workflow(documents, response=REVIEW_WITHOUT_IMPROVEMENT)
        prompt = submit(workflow)

        outcome = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.IMPROVED))

        assert outcome.status == RegistrationStatus.NO_IMPROVEMENT
        assert not outcome.consumed
        assert prompt.action_id in workflow.pending
        assert learning_items(documents) == []

    def test_register_edited_text(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        outcome = asyncio.run(
            workflow.resolve(
                prompt.action_id, RegistrationChoice.EDITED, edited_text="  직접 고친\n내용 "
            )
        )

        assert outcome.status == RegistrationStatus.REGISTERED
        assert learning_items(documents) == ["직접 고친 내용"]

    def test_empty_edit_keeps_pending(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        outcome = asyncio.run(
            workflow.resolve(prompt.action_id, RegistrationChoice.EDITED, edited_text="   ")
        )

        assert outcome.status == RegistrationStatus.EMPTY_CONTENT
        assert prompt.action_id in workflow.pending

    def test_cancel_then_any_action_expires(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        cancelled = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.CANCEL))
        again = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL))

        assert cancelled.status == RegistrationStatus.CANCELLED
        assert again.status == RegistrationStatus.EXPIRED
        assert learning_items(documents) == []

    def test_second_action_reports_expired(self, documents):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        first = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL))
        second = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.IMPROVED))

        assert first.status == RegistrationStatus.REGISTERED
        assert second.status == RegistrationStatus.EXPIRED
        assert learning_items(documents) == ["CTR 높은 방법"]

    def test_concurrent_actions_register_once(self, documents):
        """Test that two clicks racing on the same prompt write a single item."""
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)

        async def run():
            return await asyncio.gather(
                workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL),
                workflow.resolve(prompt.action_id, RegistrationChoice.IMPROVED),
            )

        statuses = sorted(outcome.status.value for outcome in asyncio.run(run()))

        assert statuses == ["expired", "registered"]
        assert len(learning_items(documents)) == 1

    def test_expired_by_ttl(self, documents):
        clock = FakeClock()
        workflow, _ = make_workflow(documents, ttl_seconds=10, clock=clock)
        prompt = submit(workflow)

        clock.now += 10
        outcome = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL))

        assert outcome.status == RegistrationStatus.EXPIRED
        assert learning_items(documents) == []

    def test_write_failure_is_reported(self, documents, tmp_path):
        workflow, _ = make_workflow(documents)
        prompt = submit(workflow)
        (tmp_path / "marketing" / "CLAUDE.md").unlink()

        outcome = asyncio.run(workflow.resolve(prompt.action_id, RegistrationChoice.ORIGINAL))

        assert outcome.status == RegistrationStatus.FAILED
        assert "CLAUDE.md" in outcome.error
        assert prompt.action_id not in workflow.pending

    def test_independent_prompts(self, documents):
        workflow, _ = make_workflow(documents)
        first = submit(workflow, content="A")
        second = submit(workflow, content="B")

        asyncio.run(workflow.resolve(second.action_id, RegistrationChoice.ORIGINAL))
        asyncio.run(workflow.resolve(first.action_id, RegistrationChoice.ORIGINAL))

        assert first.action_id != second.action_id
        assert learning_items(documents) == ["B", "A"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
