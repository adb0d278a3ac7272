"""
Generation Backend

Wraps a langchain chat model (gen_ai_hub proxy by default) behind two calls:
a single completion and a streamed completion that reports the accumulated
text after every fragment.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from app.config import get_settings
from app.models.thread import ConversationMessage, ConversationRole

logger = logging.getLogger(__name__)

EMPTY_ANSWER = "(응답을 생성하지 못했습니다)"

ProgressCallback = Callable[[str], Union[None, Awaitable[None]]]


class GenerationError(Exception):
    """Raised when the generation backend call fails."""

    pass


def build_chat_model():
    """Create the default gen_ai_hub ChatOpenAI model from settings."""
    from gen_ai_hub.proxy.core.proxy_clients import get_proxy_client
    from gen_ai_hub.proxy.langchain.openai import ChatOpenAI

    config = get_settings()
    proxy_client = get_proxy_client("gen-ai-hub")
    return ChatOpenAI(
        proxy_model_name=config.openai_model,
        proxy_client=proxy_client,
        temperature=config.temperature,
    )


def _to_langchain(
    system_prompt: str,
    messages: List[ConversationMessage],
    system_prefix: Optional[str] = None,
) -> List[BaseMessage]:
    system = f"{system_prefix}{system_prompt}" if system_prefix else system_prompt
    converted: List[BaseMessage] = [SystemMessage(content=system)]
    for message in messages:
        if message.role is ConversationRole.ASSISTANT:
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


def _text_of(content) -> str:
    """Chunk/message content may be a str or a list of content parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part if isinstance(part, str) else part.get("text", "")
            for part in content
        )
    return ""


class ChatBackend:
    """Generative-text backend used for answers and reviews."""

    def __init__(self, llm=None):
        self._llm = llm

    @property
    def llm(self):
        """Lazy initialization so the app can start without proxy credentials."""
        if self._llm is None:
            self._llm = build_chat_model()
        return self._llm

    async def complete(
        self,
        system_prompt: str,
        messages: List[ConversationMessage],
        max_tokens: int = 4096,
        system_prefix: Optional[str] = None,
    ) -> str:
        """Return the full completion for a conversation."""
        prompt = _to_langchain(system_prompt, messages, system_prefix)
        try:
            response = await self.llm.bind(max_tokens=max_tokens).ainvoke(prompt)
        except Exception as e:
            logger.error(f"Generation failed: {e}", exc_info=True)
            raise GenerationError(str(e)) from e

        text = _text_of(response.content).strip()
        return text or EMPTY_ANSWER

    async def stream(
        self,
        system_prompt: str,
        messages: List[ConversationMessage],
        on_text: Optional[ProgressCallback] = None,
        max_tokens: int = 4096,
        system_prefix: Optional[str] = None,
    ) -> str:
        """
        Stream a completion, calling on_text with the accumulated text after
        every fragment. Returns the final text.
        """
        prompt = _to_langchain(system_prompt, messages, system_prefix)
        accumulated = ""
        try:
            async for chunk in self.llm.bind(max_tokens=max_tokens).astream(prompt):
                fragment = _text_of(chunk.content)
                if not fragment:
                    continue
                accumulated += fragment
                if on_text is not None:
                    result = on_text(accumulated)
                    if result is not None:
                        await result
        except Exception as e:
            logger.error(f"Streaming generation failed after {len(accumulated)} chars: {e}", exc_info=True)
            raise GenerationError(str(e)) from e

        return accumulated.strip() or EMPTY_ANSWER
