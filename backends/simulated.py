"""Simulated model invoker that returns canned, provider-flavoured text."""

import asyncio
import logging

from config.defaults import SIMULATED_INVOKER_DELAY_SECONDS
from core.models import InvokeOptions, ModelProfile

logger = logging.getLogger(__name__)


class SimulatedInvoker:
    """
    Stand-in for real inference.

    Useful for wiring up clients and for tests: every call sleeps for
    ``delay`` seconds and echoes the start of the prompt.
    """

    def __init__(self, delay: float = SIMULATED_INVOKER_DELAY_SECONDS):
        self.delay = delay
        self.calls = 0

    async def invoke(
        self, profile: ModelProfile, prompt: str, options: InvokeOptions | None = None
    ) -> str:
        self.calls += 1
        await asyncio.sleep(self.delay)

        excerpt = prompt[:50]
        logger.debug("Simulated call to %s (%s)", profile.name, profile.model)

        if profile.provider == "anthropic":
            return f'[Claude {profile.model}] I understand your request about: "{excerpt}..." This is a simulated response from the Anthropic API.'
        if profile.provider == "openai":
            return f'[GPT {profile.model}] I received your message: "{excerpt}..." This is a simulated response from the OpenAI API.'
        if profile.provider == "alibaba":
            return f'[Qwen {profile.model}] I understand your question: "{excerpt}..." This is a simulated response from the Alibaba Cloud API.'
        if profile.provider == "google":
            return f'[Gemini {profile.model}] I\'ve processed your request about: "{excerpt}..." This is a simulated response from Google\'s API.'
        return f'[{profile.name}] Response to: "{excerpt}..." This is a simulated response.'
