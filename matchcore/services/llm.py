import logging
from typing import Optional
from openai import OpenAI
from matchcore.core.config import settings
from matchcore.core.exceptions import ExplanationUnavailableError

logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Lazily build the OpenAI client so importing this module never needs a key."""
    global _client
    if _client is None:
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.EXPLANATION_TIMEOUT_SECONDS,
            max_retries=0,  # retries belong to the caller
        )
    return _client


def generate_text(system_prompt: str, user_prompt: str, timeout: Optional[float] = None) -> str:
    """
    Run one chat completion in JSON mode and return the raw text.

    Args:
        system_prompt: Instructions for the model
        user_prompt: Payload to rewrite
        timeout: Per-call timeout in seconds (defaults to EXPLANATION_TIMEOUT_SECONDS)

    Raises:
        ExplanationUnavailableError: If the call fails or returns no content
    """
    try:
        response = get_client().with_options(
            timeout=timeout or settings.EXPLANATION_TIMEOUT_SECONDS
        ).chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            response_format={"type": "json_object"},
            temperature=settings.OPENAI_TEMPERATURE
        )
    except Exception as e:
        logger.warning(f"Text generation call failed: {e}")
        raise ExplanationUnavailableError(str(e)) from e

    content = response.choices[0].message.content
    if not content:
        raise ExplanationUnavailableError("Empty response from OpenAI")
    return content
