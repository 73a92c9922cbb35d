"""OpenAI Responses API client for diary analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from food_diary.services.analysis import AnalysisClient


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Structured-output client for diary analyses on the OpenAI Responses API.

    Each request names its JSON schema so daily and period analyses are
    validated by the API against different shapes. Replies that are empty
    or not a JSON object are rejected.
    """

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        parsed = json.loads(output_text)
        if not isinstance(parsed, dict):
            raise RuntimeError("OpenAI returned a non-object payload")
        return parsed

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
