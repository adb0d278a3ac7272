"""
Service Container

Builds every long-lived service once at startup and wires them together.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.ai_core.llm import ChatBackend
from app.ai_core.review import KnowledgeReviewer
from app.config import Settings
from app.integrations.slack.client import SlackClient
from app.integrations.slack.handlers import SlackEventHandlers
from app.services.context_resolver import ContextResolver
from app.services.conversation import ConversationService
from app.services.document_store import KnowledgeDocumentStore
from app.services.history_store import HistoryStore
from app.services.review_workflow import PendingRegistrationStore, RegistrationReviewWorkflow
from app.services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)


@dataclass
class Services:
    directory: TeamDirectory
    history: HistoryStore
    documents: KnowledgeDocumentStore
    slack: SlackClient
    resolver: ContextResolver
    conversation: ConversationService
    workflow: RegistrationReviewWorkflow
    handlers: SlackEventHandlers


def build_services(
    settings: Settings,
    slack: Optional[SlackClient] = None,
    backend: Optional[ChatBackend] = None,
    directory: Optional[TeamDirectory] = None,
) -> Services:
    """Construct the service graph. Collaborators can be injected for tests."""
    directory = directory or TeamDirectory()
    slack = slack or SlackClient()
    backend = backend or ChatBackend()

    history = HistoryStore(settings.data_dir, max_turns=settings.history_max_turns)
    history.initialize()

    documents = KnowledgeDocumentStore(
        settings.knowledge_root_path,
        directory,
        root_document=settings.root_document_path,
    )
    resolver = ContextResolver(directory, history, slack.get_channel_name)
    conversation = ConversationService(
        directory,
        documents,
        history,
        backend,
        slack,
        max_tokens=settings.answer_max_tokens,
        update_interval=settings.stream_update_interval,
        max_length=settings.slack_max_length,
        preview_length=settings.preview_max_length,
    )
    workflow = RegistrationReviewWorkflow(
        documents,
        KnowledgeReviewer(backend, max_tokens=settings.review_max_tokens),
        PendingRegistrationStore(
            ttl_seconds=settings.pending_ttl_seconds,
            max_entries=settings.pending_max_entries,
        ),
    )
    handlers = SlackEventHandlers(
        directory, resolver, history, documents, conversation, workflow, slack
    )

    logger.info(f"Services ready: {len(directory.teams)} teams, documents at {documents.root_path}")
    return Services(
        directory=directory,
        history=history,
        documents=documents,
        slack=slack,
        resolver=resolver,
        conversation=conversation,
        workflow=workflow,
        handlers=handlers,
    )
