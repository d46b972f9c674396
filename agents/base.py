"""Base agent class for all Gemini-backed agents."""

import logging
from typing import Any, Optional, Sequence

from google import genai
from google.genai import types

from agents.common.utils import parse_json_response

logger = logging.getLogger(__name__)


def create_genai_client(api_key: str) -> Optional[genai.Client]:
    """Create the Gemini client shared by every agent in the process, or None without a key."""
    if not api_key:
        logger.warning("GOOGLE_API_KEY is not set; provider calls will use fallbacks")
        return None
    return genai.Client(api_key=api_key)


class BaseAgent:
    """Base class for AI agents talking to Gemini through google-genai."""

    def __init__(
        self,
        name: str,
        instructions: str,
        client: Any,
        model: str = "gemini-2.0-flash",
    ):
        """Initialize the agent.

        Args:
            name: Agent name, used in log messages
            instructions: System instructions for the agent
            client: A ``genai.Client`` (or anything exposing ``aio.models.generate_content``)
            model: Gemini model to use
        """
        self.name = name
        self.instructions = instructions
        self.model = model
        self._client = client

    async def run(
        self,
        prompt: str,
        *,
        parts: Optional[Sequence[types.Part]] = None,
        instructions: Optional[str] = None,
        temperature: float = 0.3,
        max_output_tokens: int = 500,
        json_output: bool = False,
    ) -> str:
        """Run the agent with a prompt.

        Args:
            prompt: User prompt
            parts: Extra content parts sent before the prompt (e.g. audio)
            instructions: Overrides the agent's system instructions for this call
            temperature: Sampling temperature
            max_output_tokens: Response length limit
            json_output: Ask the model for a JSON response body

        Returns:
            Agent response text (empty string when the model returned none)
        """
        if self._client is None:
            raise RuntimeError(f"{self.name}: no provider client configured")

        contents: list[Any] = list(parts or [])
        contents.append(prompt)

        config = types.GenerateContentConfig(
            system_instruction=instructions or self.instructions,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json" if json_output else None,
        )

        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )

        return response.text or ""

    async def run_json(self, prompt: str, **kwargs: Any) -> dict[str, Any]:
        """Run the agent and parse its answer as a JSON object.

        Raises:
            ValueError: The model did not return a JSON object
        """
        text = await self.run(prompt, json_output=True, **kwargs)
        parsed = parse_json_response(text)
        if not isinstance(parsed, dict):
            raise ValueError(f"{self.name}: model response is not a JSON object")
        return parsed
