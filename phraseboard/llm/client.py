"""Multi-provider LLM client with structured output and streaming chat."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Sequence
from typing import TypeVar

from pydantic import BaseModel

from phraseboard.config import PhraseboardSettings
from phraseboard.llm.keywords import keyword_analysis, keyword_reply
from phraseboard.llm.prompts import get_prompt
from phraseboard.llm.structured import ChatTurn, TranscriptAnalysis
from phraseboard.phrases.models import AnalysisRecord
from phraseboard.providers import PROVIDERS, resolve_provider

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class LLMUsageTracker:
    """Accumulates token usage across multiple LLM calls.

    Safe to share across concurrent asyncio tasks (single-threaded event loop).
    """

    def __init__(self) -> None:
        self.input_tokens: int = 0
        self.output_tokens: int = 0
        self.calls: int = 0

    def record(self, input_tokens: int, output_tokens: int) -> None:
        """Record token usage from a single API call."""
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.calls += 1

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMClient:
    """Unified interface for LLM calls.

    Supports Claude (Anthropic), ChatGPT (OpenAI), Local (Ollama) and the
    offline keyword matcher as providers.
    """

    def __init__(self, settings: PhraseboardSettings) -> None:
        self.settings = settings
        self.provider = resolve_provider(settings.llm_provider)
        self.provider_spec = PROVIDERS[self.provider]
        self._anthropic_client: object | None = None
        self._openai_client: object | None = None
        self._local_client: object | None = None
        self.tracker = LLMUsageTracker()

        self._validate_api_key()

    def _validate_api_key(self) -> None:
        """Check that the provider's API key is configured (cloud providers only)."""
        key_setting = self.provider_spec.key_setting
        if key_setting and not getattr(self.settings, key_setting):
            raise ValueError(self.provider_spec.missing_key_message())

    @property
    def model(self) -> str:
        if self.provider == "local":
            return self.settings.local_model or self.provider_spec.default_model
        return self.settings.llm_model or self.provider_spec.default_model

    # ------------------------------------------------------------------
    # Transcript analysis
    # ------------------------------------------------------------------

    async def summarize(self, text: str) -> TranscriptAnalysis:
        """Summarise a transcript and extract positive/negative phrases."""
        if self.provider == "keywords":
            return keyword_analysis(text, self.settings.summary_max_chars)
        prompt = get_prompt("transcript-analysis")
        return await self.analyze(
            system_prompt=prompt.system,
            user_prompt=prompt.user.format(transcript=text),
            response_model=TranscriptAnalysis,
        )

    async def analyze(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[T],
        max_tokens: int | None = None,
    ) -> T:
        """Send a prompt and parse the response into a Pydantic model.

        Args:
            system_prompt: System-level instructions.
            user_prompt: The user prompt with the actual task.
            response_model: Pydantic model class for structured output.
            max_tokens: Override max tokens (defaults to settings.llm_max_tokens).
        """
        max_tokens = max_tokens or self.settings.llm_max_tokens

        if self.provider == "anthropic":
            return await self._analyze_anthropic(
                system_prompt, user_prompt, response_model, max_tokens
            )
        elif self.provider == "openai":
            return await self._analyze_openai(
                system_prompt, user_prompt, response_model, max_tokens
            )
        elif self.provider == "local":
            return await self._analyze_local(
                system_prompt, user_prompt, response_model, max_tokens
            )
        else:
            raise ValueError(f"Unsupported LLM provider for structured output: {self.provider}")

    def _get_anthropic(self):  # type: ignore[no-untyped-def]
        import anthropic

        if self._anthropic_client is None:
            self._anthropic_client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
            )
        return self._anthropic_client

    def _get_openai(self):  # type: ignore[no-untyped-def]
        import openai

        if self._openai_client is None:
            self._openai_client = openai.AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._openai_client

    def _get_local(self):  # type: ignore[no-untyped-def]
        import openai

        if self._local_client is None:
            self._local_client = openai.AsyncOpenAI(
                base_url=self.settings.local_url,
                api_key="ollama",  # Required by SDK but ignored by Ollama
            )
        return self._local_client

    @staticmethod
    def _schema_instruction(response_model: type[BaseModel]) -> str:
        schema = response_model.model_json_schema()
        return (
            f"\n\nYou must respond with valid JSON matching this schema:\n"
            f"```json\n{json.dumps(schema, indent=2)}\n```"
        )

    async def _analyze_anthropic(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[T],
        max_tokens: int,
    ) -> T:
        """Call Anthropic API with tool use for structured output."""
        client = self._get_anthropic()

        tool_name = "structured_output"
        tool = {
            "name": tool_name,
            "description": f"Return the analysis result as a {response_model.__name__} object.",
            "input_schema": response_model.model_json_schema(),
        }

        logger.debug("Calling Anthropic API: model=%s", self.model)

        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.settings.llm_temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            tools=[tool],
            tool_choice={"type": "tool", "name": tool_name},
        )

        if getattr(response, "usage", None):
            self.tracker.record(response.usage.input_tokens, response.usage.output_tokens)

        if getattr(response, "stop_reason", None) == "max_tokens":
            raise RuntimeError(
                f"Anthropic response truncated at max_tokens={max_tokens}. "
                "Raise PHRASEBOARD_LLM_MAX_TOKENS or shorten the transcript."
            )

        for block in response.content:
            if block.type == "tool_use" and block.name == tool_name:
                return response_model.model_validate(block.input)

        raise RuntimeError("No structured output found in Anthropic response")

    async def _analyze_openai(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[T],
        max_tokens: int,
    ) -> T:
        """Call OpenAI API with JSON mode for structured output."""
        client = self._get_openai()

        logger.debug("Calling OpenAI API: model=%s", self.model)

        response = await client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.settings.llm_temperature,
            response_format={"type": "json_object"},
            messages=[
                {
                    "role": "system",
                    "content": system_prompt + self._schema_instruction(response_model),
                },
                {"role": "user", "content": user_prompt},
            ],
        )

        if getattr(response, "usage", None):
            self.tracker.record(
                response.usage.prompt_tokens, response.usage.completion_tokens
            )

        choice = response.choices[0]
        if getattr(choice, "finish_reason", None) == "length":
            raise RuntimeError(
                f"OpenAI response truncated at max_tokens={max_tokens}. "
                "Raise PHRASEBOARD_LLM_MAX_TOKENS or shorten the transcript."
            )

        content = choice.message.content
        if content is None:
            raise RuntimeError("Empty response from OpenAI")

        return response_model.model_validate(json.loads(content))

    async def _analyze_local(
        self,
        system_prompt: str,
        user_prompt: str,
        response_model: type[T],
        max_tokens: int,
    ) -> T:
        """Call local Ollama-compatible API with JSON mode.

        Retries JSON parsing failures: small local models miss the schema
        far more often than cloud models.
        """
        import asyncio

        client = self._get_local()
        model = self.model
        logger.debug("Calling local API: url=%s model=%s", self.settings.local_url, model)

        max_retries = 3
        last_error: Exception | None = None

        for attempt in range(max_retries):
            try:
                response = await client.chat.completions.create(
                    model=model,
                    max_tokens=max_tokens,
                    temperature=self.settings.llm_temperature,
                    response_format={"type": "json_object"},
                    messages=[
                        {
                            "role": "system",
                            "content": system_prompt + self._schema_instruction(response_model),
                        },
                        {"role": "user", "content": user_prompt},
                    ],
                )

                if getattr(response, "usage", None):
                    self.tracker.record(
                        response.usage.prompt_tokens or 0,
                        response.usage.completion_tokens or 0,
                    )

                content = response.choices[0].message.content
                if content is None:
                    raise RuntimeError("Empty response from local model")

                return response_model.model_validate(json.loads(content))

            except json.JSONDecodeError as e:
                last_error = e
                logger.debug(
                    "JSON parse failed (attempt %d/%d): %s", attempt + 1, max_retries, e
                )
                if attempt < max_retries - 1:
                    await asyncio.sleep(0.5 * (attempt + 1))

        raise RuntimeError(
            f"Local model failed to produce valid JSON after {max_retries} attempts. "
            f"Last error: {last_error}. "
            "Try a larger model (PHRASEBOARD_LOCAL_MODEL=llama3.1:8b) "
            "or use a cloud API (--llm claude)."
        )

    # ------------------------------------------------------------------
    # Streaming chat
    # ------------------------------------------------------------------

    @staticmethod
    def chat_system_prompt(records: Sequence[AnalysisRecord], top_phrases: int = 5) -> str:
        """System prompt carrying the knowledge base for a chat reply."""
        prompt = get_prompt("chat")
        lines: list[str] = []
        for r in records:
            lines.append(f"Analysis #{r.id}: {r.summary or '(no summary)'}")
            if r.positive_phrases:
                lines.append("  positive: " + "; ".join(r.positive_phrases[:top_phrases]))
            if r.negative_phrases:
                lines.append("  negative: " + "; ".join(r.negative_phrases[:top_phrases]))
        knowledge = "\n".join(lines) or "(empty)"
        return prompt.system + "\n\n" + prompt.user.format(count=len(records), knowledge=knowledge)

    async def stream_chat(
        self,
        message: str,
        history: Sequence[ChatTurn] = (),
        knowledge: Sequence[AnalysisRecord] = (),
    ) -> AsyncIterator[str]:
        """Stream a chat reply as text chunks.

        *knowledge* is the set of analyses the reply may draw on; it's
        folded into the system prompt for hosted models and searched
        directly by the keyword provider.
        """
        if self.provider == "keywords":
            for chunk in keyword_reply(message, knowledge):
                yield chunk
            return

        system_prompt = self.chat_system_prompt(knowledge)
        messages = [{"role": t.role, "content": t.content} for t in history]
        messages.append({"role": "user", "content": message})

        if self.provider == "anthropic":
            stream = self._stream_anthropic(system_prompt, messages)
        elif self.provider == "openai":
            stream = self._stream_openai_compatible(
                self._get_openai(), self.model, system_prompt, messages
            )
        elif self.provider == "local":
            stream = self._stream_openai_compatible(
                self._get_local(), self.model, system_prompt, messages
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {self.provider}")

        async for chunk in stream:
            yield chunk

    async def _stream_anthropic(
        self, system_prompt: str, messages: list[dict[str, str]]
    ) -> AsyncIterator[str]:
        client = self._get_anthropic()
        logger.debug("Streaming from Anthropic API: model=%s", self.model)

        async with client.messages.stream(
            model=self.model,
            max_tokens=self.settings.llm_max_tokens,
            temperature=self.settings.llm_temperature,
            system=system_prompt,
            messages=messages,
        ) as stream:
            async for text in stream.text_stream:
                yield text
            final = await stream.get_final_message()

        if getattr(final, "usage", None):
            self.tracker.record(final.usage.input_tokens, final.usage.output_tokens)

    async def _stream_openai_compatible(
        self,
        client,  # type: ignore[no-untyped-def]
        model: str,
        system_prompt: str,
        messages: list[dict[str, str]],
    ) -> AsyncIterator[str]:
        logger.debug("Streaming from OpenAI-compatible API: model=%s", model)

        stream = await client.chat.completions.create(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            temperature=self.settings.llm_temperature,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            stream=True,
            stream_options={"include_usage": True},
        )
        async for chunk in stream:
            usage = getattr(chunk, "usage", None)
            if usage:
                self.tracker.record(usage.prompt_tokens or 0, usage.completion_tokens or 0)
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content
