"""OpenAI client wrapper.

Exposes a single text-completion call and maps provider failures onto the
pipeline's error taxonomy.
"""

from typing import Optional

import openai
from openai import AsyncOpenAI

from ..config import get_settings
from ..errors import AuthFailedError, ProviderFailedError, QuotaExceededError
from ..log import get_logger

settings = get_settings()
logger = get_logger("llm_client")

def clean_completion(text: str) -> str:
    """Strip whitespace and one pair of wrapping quotes."""
    content = text.strip()
    for quote in ('"', "'"):
        if len(content) >= 2 and content.startswith(quote) and content.endswith(quote):
            content = content[1:-1]
    return content.strip()

class LLMClient:
    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Created on first use so importing the package never needs a key
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise AuthFailedError("OPENAI_API_KEY is not set in environment variables")
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        return self._client

    async def complete(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or settings.MODEL
        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "user", "content": prompt}
                ],
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"OpenAI auth error: {e}")
            raise AuthFailedError("OpenAI API key is invalid or expired. Please check your API key.") from e
        except openai.RateLimitError as e:
            logger.error(f"OpenAI quota error: {e}")
            raise QuotaExceededError("OpenAI API quota exceeded. Please check your usage limits.") from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise ProviderFailedError(f"Failed to generate content: {e}") from e

        return clean_completion(completion.choices[0].message.content or "")

llm_client = LLMClient()
