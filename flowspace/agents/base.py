"""
Shared plumbing for FlowSpace's LLM-backed agents.

Every agent sends one system message and one templated user prompt, expects
JSON back, and reports upstream trouble with the exceptions defined here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config import config, token_tracker

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MESSAGE = "Empty response from OpenAI"


class UpstreamResponseError(ValueError):
    """The completion API answered, but not with something we can relay."""


class EmptyResponseError(UpstreamResponseError):
    def __init__(self, message: str = EMPTY_RESPONSE_MESSAGE):
        super().__init__(message)


class ResponseParseError(UpstreamResponseError):
    """Completion content was not valid JSON."""


class ResponseShapeError(UpstreamResponseError):
    """Completion JSON parsed but does not have the requested shape."""


def build_llm(temperature: float, model_name: Optional[str] = None) -> ChatOpenAI:
    """Create the chat model client from config."""
    return ChatOpenAI(
        model=model_name or config.model.model_name,
        temperature=temperature,
        api_key=config.model.api_key or None,
        base_url=config.model.base_url,
        timeout=config.model.request_timeout,
    )


def extract_json_text(response: str) -> str:
    """Strip markdown code fences the model may wrap around its JSON."""
    if "```json" in response:
        return response.split("```json")[1].split("```")[0].strip()
    if "```" in response:
        return response.split("```")[1].split("```")[0].strip()
    return response.strip()


class CompanionAgent:
    """
    Base class for a single-shot JSON completion agent.

    Subclasses set ``system_prompt`` and call ``_complete_json``.
    """

    system_prompt: str = "You always respond with valid JSON only."
    default_temperature: float = 0.7

    def __init__(
        self,
        llm: Any = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        """
        Initialize agent.

        Args:
            llm: Chat model to use (built from config if None)
            model_name: LLM model name
            temperature: LLM temperature (default per agent)
        """
        self.model_name = model_name or config.model.model_name
        self.temperature = (
            self.default_temperature if temperature is None else temperature
        )
        self.llm = llm or build_llm(self.temperature, self.model_name)

    def _complete(self, prompt: str) -> str:
        """Send the prompt and return the raw completion text."""
        messages = [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=prompt),
        ]
        response = self.llm.invoke(messages)
        self._record_usage(response)

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        if not content or not content.strip():
            raise EmptyResponseError()
        return content

    def _complete_json(self, prompt: str, parse_error_message: str) -> Any:
        """
        Send the prompt and parse the completion as JSON.

        Raises:
            EmptyResponseError: If the completion is empty
            ResponseParseError: If the completion is not JSON
        """
        content = self._complete(prompt)
        try:
            return json.loads(extract_json_text(content))
        except json.JSONDecodeError as e:
            logger.error("%s: %s raw content: %r", type(self).__name__, e, content)
            raise ResponseParseError(parse_error_message) from e

    def _record_usage(self, response: Any) -> None:
        usage = getattr(response, "usage_metadata", None)
        if not isinstance(usage, dict):
            return
        input_tokens = usage.get("input_tokens", 0)
        output_tokens = usage.get("output_tokens", 0)
        token_tracker.add_tokens(input_tokens, output_tokens)
        if config.logging.log_tokens:
            logger.info(
                "%s used %d input / %d output tokens",
                type(self).__name__,
                input_tokens,
                output_tokens,
            )
