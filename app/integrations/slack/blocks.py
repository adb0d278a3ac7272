"""
Slack Block Kit Views

Review prompt with the registration choices, and the edit-before-register modal.
"""

from typing import Any, Dict, List

from app.models.registration import PendingRegistration, RegistrationChoice, ReviewPrompt
from app.models.team import TeamDescriptor

ACTION_REGISTER_ORIGINAL = "register_original"
ACTION_REGISTER_IMPROVED = "register_improved"
ACTION_REGISTER_CUSTOM = "register_custom"
ACTION_REGISTER_CANCEL = "register_cancel"

CUSTOM_REGISTER_CALLBACK = "custom_register_modal"
CONTENT_BLOCK_ID = "content_block"
CONTENT_INPUT_ID = "content_input"

# Slack action_id -> workflow choice
ACTION_CHOICES: Dict[str, RegistrationChoice] = {
    ACTION_REGISTER_ORIGINAL: RegistrationChoice.ORIGINAL,
    ACTION_REGISTER_IMPROVED: RegistrationChoice.IMPROVED,
    ACTION_REGISTER_CUSTOM: RegistrationChoice.EDITED,
    ACTION_REGISTER_CANCEL: RegistrationChoice.CANCEL,
}

# Slack caps a section's mrkdwn text at 3000 characters
SECTION_TEXT_LIMIT = 3000


def _button(text: str, action_id: str, value: str, style: str | None = None) -> Dict[str, Any]:
    button: Dict[str, Any] = {
        "type": "button",
        "text": {"type": "plain_text", "text": text},
        "action_id": action_id,
        "value": value,
    }
    if style:
        button["style"] = style
    return button


def build_review_blocks(prompt: ReviewPrompt, team: TeamDescriptor) -> List[Dict[str, Any]]:
    """Review result followed by the choice buttons. The improved button only appears with a rewrite."""
    critique = prompt.review.critique
    if len(critique) > SECTION_TEXT_LIMIT:
        critique = critique[: SECTION_TEXT_LIMIT - 3] + "..."

    buttons = [_button("1️⃣ 원본 그대로 등록", ACTION_REGISTER_ORIGINAL, prompt.action_id, "primary")]
    if prompt.has_improvement:
        buttons.append(
            _button("2️⃣ 개선안으로 등록", ACTION_REGISTER_IMPROVED, prompt.action_id, "primary")
        )
    buttons.append(_button("3️⃣ 직접 수정 후 등록", ACTION_REGISTER_CUSTOM, prompt.action_id))
    buttons.append(_button("4️⃣ 취소", ACTION_REGISTER_CANCEL, prompt.action_id, "danger"))

    return [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"{team.emoji} *{team.name}* - {prompt.kind.label} 등록 검토",
            },
        },
        {"type": "divider"},
        {"type": "section", "text": {"type": "mrkdwn", "text": critique}},
        {"type": "divider"},
        {"type": "actions", "block_id": prompt.action_id, "elements": buttons},
    ]


def build_edit_modal(pending: PendingRegistration) -> Dict[str, Any]:
    """Modal pre-filled with the improved text if present, else the original."""
    return {
        "type": "modal",
        "callback_id": CUSTOM_REGISTER_CALLBACK,
        "private_metadata": pending.action_id,
        "title": {"type": "plain_text", "text": f"{pending.kind.label} 직접 수정"},
        "submit": {"type": "plain_text", "text": "등록"},
        "close": {"type": "plain_text", "text": "취소"},
        "blocks": [
            {
                "type": "input",
                "block_id": CONTENT_BLOCK_ID,
                "label": {"type": "plain_text", "text": "등록할 내용을 수정해주세요"},
                "element": {
                    "type": "plain_text_input",
                    "action_id": CONTENT_INPUT_ID,
                    "multiline": True,
                    "initial_value": pending.edit_seed,
                },
            }
        ],
    }
