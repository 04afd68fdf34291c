from .client import llm_client
from .prompts import render_prompt
from ..mlops.tracing import tracer

async def summarize_changes(analysis: str) -> str:
    """
    Turn the rendered change analysis into a plain-text summary of what was accomplished.
    Single provider call; errors propagate to the caller.
    """
    prompt = render_prompt("summarize", analysis=analysis)
    with tracer.span("summarize", span_type="LLM", inputs={"analysis": analysis}) as span:
        summary = await llm_client.complete(prompt)
        tracer.annotate(span, summary_length=len(summary))
    return summary
