"""Post composition with a hard length guarantee.

The model is asked twice to respect the character budget (a normal prompt,
then a stricter one). If both answers are still too long, the text is cut
down deterministically at sentence, then word boundaries.
"""

from typing import Optional

from .client import llm_client
from .prompts import render_prompt
from ..config import get_settings
from ..errors import ValidationError
from ..log import get_logger
from ..mlops.tracing import tracer
from ..quality.sentence import fit_to_budget

settings = get_settings()
logger = get_logger("compose")


def post_prefix(project_name: Optional[str]) -> str:
    return f"{project_name} Updates\n\n" if project_name else ""


async def compose_post(
    summary: str,
    project_name: Optional[str] = None,
    character_limit: Optional[int] = None,
) -> str:
    """
    Returns prefix + body with len(result) <= character_limit.

    Args:
        summary: Accomplishment summary from the summarizer
        project_name: When given, the post starts with "<project_name> Updates"
        character_limit: Defaults to X_CHARACTER_LIMIT
    """
    limit = settings.X_CHARACTER_LIMIT if character_limit is None else character_limit
    prefix = post_prefix(project_name)
    max_length = limit - len(prefix)
    if max_length <= 0:
        raise ValidationError(f"Project name is too long to fit a post within {limit} characters")

    prefix_note = (
        f"The post will be prefixed with {prefix!r} which is {len(prefix)} characters"
        if prefix else "No prefix will be added"
    )

    with tracer.span("compose", span_type="LLM", attributes={"max_length": max_length}) as span:
        post = await llm_client.complete(render_prompt(
            "compose_post",
            summary=summary,
            max_length=max_length,
            character_limit=limit,
            prefix_note=prefix_note,
        ))
        attempts = 1

        if len(post) > max_length:
            logger.info(f"Post too long ({len(post)} > {max_length}), retrying with stricter prompt")
            post = await llm_client.complete(render_prompt(
                "compose_post_strict",
                summary=summary,
                max_length=max_length,
            ))
            attempts = 2

        if len(post) > max_length:
            logger.warning(f"Post still too long ({len(post)} > {max_length}), truncating")
            post = fit_to_budget(post, max_length)

        tracer.annotate(span, attempts=attempts, post_length=len(post))

    return f"{prefix}{post}"
