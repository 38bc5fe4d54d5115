"""
Model invoker backed by pydantic_ai.

Profiles are mapped to pydantic_ai model strings (``"<prefix>:<model>"``).
Credentials come from each provider's usual environment variable.
"""

import logging
import os

from pydantic_ai import Agent

from config.defaults import DEFAULT_MODEL_PROVIDERS
from core.exceptions import CollaboratorError
from core.models import InvokeOptions, ModelProfile

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."


def model_string(profile: ModelProfile) -> str:
    """
    Build the pydantic_ai model string for a profile.

    Raises:
        CollaboratorError: If the provider has no pydantic_ai equivalent
    """
    provider = DEFAULT_MODEL_PROVIDERS.get(profile.provider)
    if provider is None:
        raise CollaboratorError(f"Unsupported model provider: {profile.provider}")
    return f"{provider['prefix']}:{profile.model}"


class PydanticAIInvoker:
    """Runs prompts through pydantic_ai agents, one cached agent per model and system prompt."""

    def __init__(self, system_prompt: str = DEFAULT_SYSTEM_PROMPT):
        self.system_prompt = system_prompt
        self._agents: dict[tuple[str, str], Agent] = {}

    def _agent_for(self, profile: ModelProfile, system_prompt: str) -> Agent:
        name = model_string(profile)
        key = (name, system_prompt)
        agent = self._agents.get(key)
        if agent is not None:
            return agent

        env_key = DEFAULT_MODEL_PROVIDERS[profile.provider]["env_key"]
        if env_key and not os.environ.get(env_key):
            raise CollaboratorError(f"{env_key} is not set; cannot use model {profile.name}")

        try:
            agent = Agent(name, system_prompt=system_prompt)
        except Exception as e:
            raise CollaboratorError(f"Failed to create agent for {name}: {e}") from e
        self._agents[key] = agent
        logger.info("Created agent for %s", name)
        return agent

    async def invoke(
        self, profile: ModelProfile, prompt: str, options: InvokeOptions | None = None
    ) -> str:
        options = options or InvokeOptions()
        agent = self._agent_for(profile, options.system_prompt or self.system_prompt)

        model_settings = {
            "max_tokens": options.max_tokens or profile.max_tokens,
            "temperature": options.temperature if options.temperature is not None else profile.temperature,
        }
        result = await agent.run(prompt, model_settings=model_settings)
        return str(result.output)
