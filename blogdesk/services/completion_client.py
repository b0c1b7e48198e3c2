"""Completion Client: chat replies and authoring assistance over LangChain models.

Every public operation takes an explicit catalogue key. A key whose provider
has no credential fails with ProviderNotConfiguredError before any network
call. Streaming replies propagate provider failures as CompletionError; the
one-shot authoring helpers log them and return an empty fallback instead.
"""

import json
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from blogdesk.core.exceptions import (
    AppException,
    CompletionError,
    ProviderNotConfiguredError,
    UnknownModelError,
)
from blogdesk.schemas.chat_schema import ChatMessage
from blogdesk.schemas.project_schema import PRESET_ICONS
from blogdesk.services.llm_providers import CompletionProvider
from blogdesk.services.model_catalogue import MODEL_CATALOGUE, ModelSpec, ProviderName
from blogdesk.services.output_sanitizer import (
    clean_icon_name,
    clean_summary,
    clean_svg,
    extract_json_array,
)

logger = structlog.get_logger()

TokenCallback = Callable[[str], None]

DEFAULT_CHAT_PROMPT = (
    "你是一个友好、专业的 AI 助手，服务于一个个人博客。"
    "请用简洁清晰的语言回答，必要时使用 Markdown 格式。"
)

SUMMARY_PROMPT = (
    "你是一个专业的个人博客编辑助手。请根据用户提供的 Markdown 文章内容，"
    "生成一段简洁、优雅、有吸引力的中文摘要（Summary）。要求：\n"
    "1. 字数控制在 60-120 字之间。\n"
    "2. 语气平和、知性、高级，符合个人博客的调性。\n"
    "3. 直接输出摘要内容，不要包含“好的”、“这是摘要”等任何开场白或结束语。"
)

TAGS_PROMPT = (
    "你是一个专业的博客标签生成器。\n"
    "请根据文章标题和内容，生成 {count} 个最相关的技术或主题标签。\n"
    "{existing}"
    '标签应简洁精准（例如："React", "Web Design", "Life"）。\n'
    '必须只返回一个纯 JSON 字符串数组，例如：["Tag1", "Tag2"]。\n'
    "不要返回任何 markdown 格式（如 ```json），不要有任何解释文字。"
)

ICON_PROMPT = (
    "你是一个UI设计师。请从我提供的【图标列表】中，严格选择一个最能代表用户项目名称和描述的图标名称。\n\n"
    "【图标列表】：\n{icons}\n\n"
    "重要规则：\n"
    "1. 你必须只输出列表中的某一个单词。\n"
    "2. 严禁编造列表中不存在的单词。\n"
    "3. 严禁输出任何标点符号、Markdown标记或解释性文字。\n"
    "4. 如果没有完美匹配，请选择最接近的通用图标（如 Globe, Layout, Box, Star）。\n"
    "5. 直接输出单词本身。"
)

SVG_PROMPT = (
    "你是一个 SVG 代码生成器。请根据项目描述，生成一个现代、简约、Outline 风格的 SVG 图标代码。\n\n"
    "技术约束：\n"
    '1. 必须包含 viewBox="0 0 24 24"。\n'
    '2. 必须设置 stroke="currentColor", fill="none", stroke-width="2", '
    'stroke-linecap="round", stroke-linejoin="round"。\n'
    "3. 仅返回 <svg>...</svg> 标签及其内容。\n"
    "4. 严禁包含 <?xml ...?> 声明或 <!DOCTYPE ...>。\n"
    "5. 严禁使用 markdown 代码块标记（如 ```xml 或 ```svg）。不要有任何文字解释。\n"
    "6. 确保代码是有效的 SVG，可以直接嵌入 HTML。"
)

CHAT_TEMPERATURE = 0.7
SUMMARY_TEMPERATURE = 1.0
TAGS_TEMPERATURE = 0.7
ICON_TEMPERATURE = 0.1
SVG_TEMPERATURE = 0.7

TAG_CONTENT_CHARS = 500


def content_text(content: Any) -> str:
    """Text of a message or chunk ``content``, which may be a list of blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return ""


def to_langchain_messages(history: list[ChatMessage]) -> list[BaseMessage]:
    """Convert transcript messages to LangChain message objects."""
    messages: list[BaseMessage] = []
    for msg in history:
        if msg.role == "user":
            messages.append(HumanMessage(content=msg.content))
        elif msg.role == "assistant":
            messages.append(AIMessage(content=msg.content))
        elif msg.role == "system":
            messages.append(SystemMessage(content=msg.content))
    return messages


class CompletionClient:
    """Provider-polymorphic access to the models in the catalogue."""

    def __init__(
        self,
        providers: Mapping[ProviderName, CompletionProvider],
        catalogue: Mapping[str, ModelSpec] = MODEL_CATALOGUE,
    ) -> None:
        self._providers = providers
        self._catalogue = catalogue

    def is_available(self, model_key: str) -> bool:
        spec = self._catalogue.get(model_key)
        if spec is None:
            return False
        provider = self._providers.get(spec.provider)
        return provider is not None and provider.is_configured

    def _build(self, model_key: str, temperature: float, streaming: bool) -> BaseChatModel:
        spec = self._catalogue.get(model_key)
        if spec is None:
            raise UnknownModelError(model_key)
        provider = self._providers.get(spec.provider)
        if provider is None or not provider.is_configured:
            raise ProviderNotConfiguredError(spec.provider)
        return provider.build_model(spec.model_name, temperature, streaming)

    # --- Streaming ---

    async def stream_reply(
        self,
        history: list[ChatMessage],
        model_key: str,
        on_token: TokenCallback,
        system_prompt: str | None = None,
    ) -> str:
        """Stream a reply to ``history``, calling ``on_token`` per fragment.

        Returns the full reply once the stream ends. Fragments are delivered
        in arrival order; empty ones are skipped.
        """
        messages: list[BaseMessage] = [
            SystemMessage(content=system_prompt or DEFAULT_CHAT_PROMPT),
            *to_langchain_messages(history),
        ]
        return await self._stream(model_key, messages, CHAT_TEMPERATURE, on_token)

    async def stream_summary(
        self, content: str, model_key: str, on_token: TokenCallback
    ) -> str:
        messages: list[BaseMessage] = [
            SystemMessage(content=SUMMARY_PROMPT),
            HumanMessage(content=content),
        ]
        return await self._stream(model_key, messages, SUMMARY_TEMPERATURE, on_token)

    async def _stream(
        self,
        model_key: str,
        messages: list[BaseMessage],
        temperature: float,
        on_token: TokenCallback,
    ) -> str:
        llm = self._build(model_key, temperature, streaming=True)
        parts: list[str] = []
        try:
            async for chunk in llm.astream(messages):
                text = content_text(chunk.content)
                if not text:
                    continue
                parts.append(text)
                on_token(text)
        except AppException:
            raise
        except Exception as exc:
            logger.warning("Completion stream failed", model_key=model_key, error=str(exc))
            raise CompletionError(str(exc) or type(exc).__name__) from exc
        return "".join(parts)

    # --- One-shot authoring helpers ---

    async def _complete(
        self, model_key: str, system: str, user: str, temperature: float
    ) -> str | None:
        """Single completion; None when the provider call itself failed."""
        llm = self._build(model_key, temperature, streaming=False)
        try:
            response = await llm.ainvoke(
                [SystemMessage(content=system), HumanMessage(content=user)]
            )
        except Exception as exc:
            logger.warning("Completion failed", model_key=model_key, error=str(exc))
            return None
        return content_text(response.content)

    async def summarize(self, content: str, model_key: str) -> str:
        result = await self._complete(model_key, SUMMARY_PROMPT, content, SUMMARY_TEMPERATURE)
        return clean_summary(result) if result else ""

    async def suggest_tags(
        self,
        title: str,
        content: str,
        existing_tags: list[str],
        model_key: str,
    ) -> list[str]:
        """Suggest two tags, or one more when the article already has tags.

        Suggestions repeating an existing tag (case-insensitive) are dropped.
        """
        count = 1 if existing_tags else 2
        existing = (
            f"现有标签为：{json.dumps(existing_tags, ensure_ascii=False)}，请不要重复。\n"
            if existing_tags
            else ""
        )
        system = TAGS_PROMPT.format(count=count, existing=existing)
        user = f"标题：{title}\n内容摘要：{content[:TAG_CONTENT_CHARS]}"

        result = await self._complete(model_key, system, user, TAGS_TEMPERATURE)
        if not result:
            return []
        tags = extract_json_array(result)
        if not tags:
            logger.warning("Discarding malformed tag suggestion", output=result[:200])

        seen = {tag.lower() for tag in existing_tags}
        unique: list[str] = []
        for tag in tags:
            if tag.lower() in seen:
                continue
            seen.add(tag.lower())
            unique.append(tag)
        return unique[:count]

    async def recommend_icon(
        self,
        title: str,
        description: str,
        available_icons: list[str],
        model_key: str,
    ) -> str | None:
        icons = available_icons or PRESET_ICONS
        system = ICON_PROMPT.format(icons=",".join(icons))
        user = f"项目名称：{title}\n描述：{description}"

        result = await self._complete(model_key, system, user, ICON_TEMPERATURE)
        if not result:
            return None
        icon = clean_icon_name(result, icons)
        if icon is None:
            logger.warning("Recommended icon not in allowed set", output=result[:100])
        return icon

    async def generate_icon_art(
        self, title: str, description: str, model_key: str
    ) -> str:
        user = f"项目名称：{title}\n描述：{description}\n设计要求：抽象、极简、高科技感。"
        result = await self._complete(model_key, SVG_PROMPT, user, SVG_TEMPERATURE)
        if not result:
            return ""
        svg = clean_svg(result)
        if not svg:
            logger.warning("Discarding malformed SVG output", output=result[:200])
        return svg
