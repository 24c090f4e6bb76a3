"""OpenAI Chat Completions client for meal parsing."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from meal_logger.domain.errors import AITransportError, ConfigurationError
from meal_logger.services.parsing import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by OpenAI chat completions in JSON mode."""

    client: AsyncOpenAI | None
    model: str = "gpt-4o-mini"
    temperature: float = 0.3

    @classmethod
    def create(
        cls, api_key: str | None, model: str, temperature: float
    ) -> "OpenAICompletionClient":
        """Create a client; a missing key fails on first use."""
        client = AsyncOpenAI(api_key=api_key) if api_key else None
        return cls(client=client, model=model, temperature=temperature)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the message content of a single completion."""
        if self.client is None:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except openai.APIError as exc:
            raise AITransportError(details=f"OpenAI API error: {exc}") from exc
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AITransportError(details="No content in OpenAI response")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.client is not None:
            await self.client.close()
