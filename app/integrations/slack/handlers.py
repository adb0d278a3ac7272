"""
Slack Event Handlers

Routes mentions, thread replies, button clicks and modal submissions to the
services. Every handler catches its own failures and reports them in Slack;
nothing is re-raised to the Bolt transport.
"""

import logging
from typing import Dict, Optional

from slack_bolt.async_app import AsyncApp

from app.integrations.slack.blocks import (
    ACTION_CHOICES,
    CONTENT_BLOCK_ID,
    CONTENT_INPUT_ID,
    CUSTOM_REGISTER_CALLBACK,
    build_edit_modal,
    build_review_blocks,
)
from app.integrations.slack.client import SlackClient
from app.integrations.slack.models import (
    ActionClick,
    MentionEvent,
    ModalSubmission,
    ThreadMessageEvent,
)
from app.integrations.slack.parser import parse_command, parse_settings_command
from app.models.registration import (
    PendingRegistration,
    RegistrationChoice,
    RegistrationOutcome,
    RegistrationStatus,
)
from app.models.team import ParsedCommand, SettingsAction, SettingsCommand
from app.services.context_resolver import ContextResolver
from app.services.conversation import ConversationService
from app.services.document_store import DocumentNotFoundError, KnowledgeDocumentStore
from app.services.history_store import HistoryStore
from app.services.review_workflow import RegistrationReviewWorkflow
from app.services.team_directory import TeamDirectory

logger = logging.getLogger(__name__)

EXPIRED_TEXT = "등록 정보가 만료되었습니다. 다시 시도해주세요."
NO_IMPROVEMENT_TEXT = "등록 정보가 만료되었거나 개선안이 없습니다."
CANCELLED_TEXT = "등록이 취소되었습니다."
EMPTY_EDIT_TEXT = "등록할 내용을 입력해주세요."

# Outcomes that leave the document untouched
NOTICE_TEXT: Dict[RegistrationStatus, str] = {
    RegistrationStatus.EXPIRED: EXPIRED_TEXT,
    RegistrationStatus.NO_IMPROVEMENT: NO_IMPROVEMENT_TEXT,
    RegistrationStatus.EMPTY_CONTENT: EMPTY_EDIT_TEXT,
    RegistrationStatus.CANCELLED: CANCELLED_TEXT,
}

CHOICE_SUFFIX: Dict[RegistrationChoice, str] = {
    RegistrationChoice.ORIGINAL: "",
    RegistrationChoice.IMPROVED: " (개선안)",
    RegistrationChoice.EDITED: " (직접 수정)",
}


def error_text(error: Exception) -> str:
    return f"❌ 오류가 발생했습니다: {error}"


class SlackEventHandlers:
    """Handler logic, independent of the Bolt wiring."""

    def __init__(
        self,
        directory: TeamDirectory,
        resolver: ContextResolver,
        history: HistoryStore,
        documents: KnowledgeDocumentStore,
        conversation: ConversationService,
        workflow: RegistrationReviewWorkflow,
        slack: SlackClient,
    ):
        self.directory = directory
        self.resolver = resolver
        self.history = history
        self.documents = documents
        self.conversation = conversation
        self.workflow = workflow
        self.slack = slack

    async def _reply(self, channel_id: str, thread_ts: str, text: str) -> None:
        await self.slack.post_message(channel_id, text, thread_ts=thread_ts)

    # ------------------------------------------------------------------
    # Mentions
    # ------------------------------------------------------------------

    async def handle_mention(self, event: MentionEvent) -> None:
        thread_ts = event.reply_thread_ts
        try:
            settings_command = parse_settings_command(event.text, self.directory)
            if settings_command:
                await self._handle_settings(event, settings_command)
                return

            parsed = parse_command(event.text, self.directory)
            if parsed.is_listing:
                await self._handle_listing(event, parsed)
            elif parsed.is_registration:
                await self._handle_registration(event, parsed)
            else:
                team_key = await self.resolver.resolve(
                    event.channel_id, event.thread_ts, explicit_team=parsed.team_key
                )
                await self._handle_question(event, team_key, parsed.body)

        except Exception as e:
            logger.error(f"Mention handling failed in {event.channel_id}: {e}", exc_info=True)
            await self._reply(event.channel_id, thread_ts, error_text(e))

    async def _handle_settings(self, event: MentionEvent, command: SettingsCommand) -> None:
        channel_id, thread_ts = event.channel_id, event.reply_thread_ts

        if command.action is SettingsAction.CLEAR:
            await self.history.clear_channel_team(channel_id)
            await self._reply(channel_id, thread_ts, "이 채널의 팀 설정이 해제되었습니다.")
            return

        if command.action is SettingsAction.SHOW:
            current = await self.history.get_channel_team_setting(channel_id)
            if current and current in self.directory:
                text = f"이 채널의 기본 팀: {self.directory.label(current)}"
            else:
                text = (
                    "이 채널에 설정된 팀이 없습니다.\n"
                    "예: `@봇 설정 마케팅`\n"
                    f"사용 가능한 팀: {self.directory.usage_names()}"
                )
            await self._reply(channel_id, thread_ts, text)
            return

        # The parser only emits SET for a name that resolves
        team_key = self.directory.resolve(command.team_name or "")
        await self.history.set_channel_team(channel_id, team_key)
        await self._reply(
            channel_id,
            thread_ts,
            f"✅ 이 채널의 기본 팀이 {self.directory.label(team_key)}(으)로 설정되었습니다.",
        )

    async def _handle_listing(self, event: MentionEvent, parsed: ParsedCommand) -> None:
        channel_id, thread_ts = event.channel_id, event.reply_thread_ts
        kind = parsed.section_kind

        if not parsed.team_key:
            await self._reply(channel_id, thread_ts, "팀명을 지정해주세요. 예: `@봇 마케팅-학습목록`")
            return

        label = self.directory.label(parsed.team_key)
        items = await self.documents.list_items(parsed.team_key, kind)
        if not items:
            await self._reply(channel_id, thread_ts, f"{label} - 등록된 {kind.label}이 없습니다.")
            return

        numbered = "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))
        await self.conversation.deliver(
            channel_id, thread_ts, f"{label} - {kind.label} 목록 ({len(items)}건)\n\n{numbered}"
        )

    async def _handle_registration(self, event: MentionEvent, parsed: ParsedCommand) -> None:
        channel_id, thread_ts = event.channel_id, event.reply_thread_ts
        kind = parsed.section_kind

        if not parsed.team_key:
            await self._reply(channel_id, thread_ts, "팀명을 지정해주세요. 예: `@봇 마케팅-학습 [내용]`")
            return
        if not parsed.body.strip():
            await self._reply(channel_id, thread_ts, f"등록할 {kind.short_label} 내용을 입력해주세요.")
            return

        team = self.directory.get(parsed.team_key)
        await self._reply(channel_id, thread_ts, f"{team.label} {kind.label} 등록 검토 중...")

        try:
            prompt = await self.workflow.submit(
                team_key=team.key,
                kind=kind,
                content=parsed.body,
                user_id=event.user_id or "",
                channel_id=channel_id,
                thread_ts=thread_ts,
            )
        except DocumentNotFoundError as e:
            logger.error(f"Registration review aborted: {e}")
            await self._reply(channel_id, thread_ts, f"❌ 등록 실패: {e}")
            return

        await self.slack.post_message(
            channel_id,
            f"{kind.label} 등록 검토 결과",
            thread_ts=thread_ts,
            blocks=build_review_blocks(prompt, team),
        )

    async def _handle_question(self, event: MentionEvent, team_key: Optional[str], body: str) -> None:
        channel_id, thread_ts = event.channel_id, event.reply_thread_ts

        if not body.strip():
            if team_key:
                label = self.directory.label(team_key)
                text = (
                    f"{label}에게 질문하려면 내용을 입력해주세요.\n"
                    f"예: `@봇 {team_key} 광고 캠페인 기획해줘`"
                )
            else:
                text = (
                    "무엇을 도와드릴까요? 팀명과 함께 질문해주세요.\n"
                    "예: `@봇 마케팅 광고 캠페인 기획해줘`"
                )
            await self._reply(channel_id, thread_ts, text)
            return

        await self.conversation.answer(channel_id, thread_ts, team_key, body.strip())

    # ------------------------------------------------------------------
    # Thread replies without a mention
    # ------------------------------------------------------------------

    async def handle_thread_message(
        self, event: ThreadMessageEvent, bot_user_id: Optional[str] = None
    ) -> None:
        try:
            if not event.is_relevant(bot_user_id):
                return

            text = event.text.strip()
            if not text:
                return

            record = await self.history.get_thread(event.channel_id, event.thread_ts)
            if record is None or (record.team is None and not record.messages):
                # The bot has not taken part in this thread
                return

            team_key = await self.resolver.resolve(event.channel_id, event.thread_ts)
            await self.conversation.answer(event.channel_id, event.thread_ts, team_key, text)
        except Exception as e:
            logger.error(f"Thread reply failed in {event.channel_id}:{event.thread_ts}: {e}", exc_info=True)
            await self._reply(event.channel_id, event.thread_ts, error_text(e))

    # ------------------------------------------------------------------
    # Review prompt buttons and edit modal
    # ------------------------------------------------------------------

    async def _ephemeral(self, click: ActionClick, text: str) -> None:
        if not click.channel_id or not click.user_id:
            logger.warning(f"Cannot post ephemeral for {click.action_id}: {text}")
            return
        await self.slack.post_ephemeral(click.channel_id, click.user_id, text)

    async def _notify(
        self,
        text: str,
        click: Optional[ActionClick],
        pending: Optional[PendingRegistration],
    ) -> None:
        """Ephemeral reply to a button click, else a note in the registration's thread."""
        if click:
            await self._ephemeral(click, text)
        elif pending:
            await self._reply(pending.channel_id, pending.thread_ts, text)
        else:
            logger.warning(f"No channel to report to: {text}")

    async def handle_action(self, click: ActionClick) -> None:
        try:
            choice = ACTION_CHOICES.get(click.action_id)
            if choice is None:
                logger.warning(f"Ignoring unknown action {click.action_id}")
                return

            if not click.pending_id:
                await self._ephemeral(click, EXPIRED_TEXT)
                return

            if choice is RegistrationChoice.EDITED:
                pending = self.workflow.begin_edit(click.pending_id)
                if pending is None or not click.trigger_id:
                    await self._ephemeral(click, EXPIRED_TEXT)
                    return
                await self.slack.open_modal(click.trigger_id, build_edit_modal(pending))
                return

            outcome = await self.workflow.resolve(click.pending_id, choice)
            await self._report(outcome, click)

        except Exception as e:
            logger.error(f"Action {click.action_id} failed: {e}", exc_info=True)
            await self._ephemeral(click, error_text(e))

    def validate_submission(self, submission: ModalSubmission) -> Optional[Dict[str, str]]:
        """Modal errors to send back with the ack, or None when the submission is acceptable."""
        if self.workflow.begin_edit(submission.pending_id) is None:
            return {CONTENT_BLOCK_ID: EXPIRED_TEXT}
        if not submission.content:
            return {CONTENT_BLOCK_ID: EMPTY_EDIT_TEXT}
        return None

    async def handle_modal_submission(self, submission: ModalSubmission) -> None:
        # Captured before resolving, which consumes the entry
        pending = self.workflow.begin_edit(submission.pending_id)
        try:
            outcome = await self.workflow.resolve(
                submission.pending_id, RegistrationChoice.EDITED, edited_text=submission.content
            )
            await self._report(outcome, None, pending)
        except Exception as e:
            logger.error(f"Modal submission {submission.pending_id} failed: {e}", exc_info=True)
            await self._notify(error_text(e), None, pending)

    async def _report(
        self,
        outcome: RegistrationOutcome,
        click: Optional[ActionClick],
        known: Optional[PendingRegistration] = None,
    ) -> None:
        """Tell the user how a terminal action ended."""
        status = outcome.status

        notice = NOTICE_TEXT.get(status)
        if notice:
            await self._notify(notice, click, outcome.pending or known)
            return

        pending = outcome.pending
        if status is RegistrationStatus.FAILED:
            text = f"❌ 등록 실패: {outcome.error}"
        else:
            team = self.directory.get(pending.team_key)
            text = (
                f"✅ {team.emoji} {team.name}에 {pending.kind.label} 등록 완료!"
                f"{CHOICE_SUFFIX.get(outcome.choice, '')}\n> {outcome.content}"
            )
        await self._reply(pending.channel_id, pending.thread_ts, text)


def register_handlers(app: AsyncApp, handlers: SlackEventHandlers) -> None:
    """Register all Slack listeners on the Bolt app."""

    @app.event("app_mention")
    async def on_mention(event):
        await handlers.handle_mention(MentionEvent.from_event(event))

    @app.event("message")
    async def on_message(event, context):
        message = ThreadMessageEvent.from_event(event)
        if message is not None:
            await handlers.handle_thread_message(message, context.bot_user_id)

    async def on_action(ack, body):
        await ack()
        await handlers.handle_action(ActionClick.from_body(body))

    for action_id in ACTION_CHOICES:
        app.action(action_id)(on_action)

    @app.view(CUSTOM_REGISTER_CALLBACK)
    async def on_modal_submit(ack, body, view):
        submission = ModalSubmission.from_view(
            view,
            CONTENT_BLOCK_ID,
            CONTENT_INPUT_ID,
            user_id=(body.get("user") or {}).get("id"),
        )
        errors = handlers.validate_submission(submission)
        if errors:
            await ack(response_action="errors", errors=errors)
            return
        await ack()
        await handlers.handle_modal_submission(submission)

    logger.info("Slack handlers registered")
