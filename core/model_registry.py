"""
Model profile registry and prompt dispatch.

Holds the named model profiles, the purpose pointers and the current model,
and routes prompts to the model invoker collaborator. The registry resolves
targets only; it has no retry policy and lets invoker failures propagate.
"""

import asyncio
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from .collaborators import ModelInvoker
from .exceptions import InvalidOperationError, NotFoundError
from .models import (
    InvokeOptions,
    ModelPointers,
    ModelProfile,
    ModelPurpose,
    ParallelRequest,
    ParallelResult,
)

logger = logging.getLogger(__name__)


DEFAULT_MODEL_PROFILES: list[ModelProfile] = [
    ModelProfile(
        name="claude-sonnet",
        provider="anthropic",
        model="claude-sonnet-4-20250514",
        max_tokens=8192,
        temperature=0.3,
        context_window=200000,
    ),
    ModelProfile(
        name="claude-haiku",
        provider="anthropic",
        model="claude-3-5-haiku-20241022",
        max_tokens=8192,
        temperature=0.3,
        context_window=200000,
    ),
    ModelProfile(
        name="gpt-4",
        provider="openai",
        model="gpt-4",
        max_tokens=4096,
        temperature=0.3,
        context_window=128000,
    ),
    ModelProfile(
        name="gpt-4o",
        provider="openai",
        model="gpt-4o",
        max_tokens=4096,
        temperature=0.3,
        context_window=128000,
    ),
    ModelProfile(
        name="qwen-coder",
        provider="alibaba",
        model="qwen-coder-plus",
        max_tokens=8192,
        temperature=0.3,
        context_window=32000,
    ),
    ModelProfile(
        name="gemini-pro",
        provider="google",
        model="gemini-1.5-pro",
        max_tokens=8192,
        temperature=0.3,
        context_window=2097152,
    ),
]

DEFAULT_MODEL_POINTERS = ModelPointers(
    main="claude-sonnet",
    task="qwen-coder",
    reasoning="gpt-4",
    quick="claude-haiku",
)

PURPOSES: tuple[str, ...] = ("main", "task", "reasoning", "quick")


class ModelRegistry:
    """Registry of model profiles with a single mutable current-model pointer."""

    def __init__(
        self,
        invoker: ModelInvoker,
        profiles: Iterable[ModelProfile] | None = None,
        pointers: ModelPointers | None = None,
        current: str | None = None,
    ):
        """
        Initialize the registry.

        Args:
            invoker: Model invocation collaborator
            profiles: Initial profiles (defaults to DEFAULT_MODEL_PROFILES)
            pointers: Purpose pointers (defaults to DEFAULT_MODEL_POINTERS)
            current: Initial current model (defaults to the ``main`` pointer)

        Raises:
            NotFoundError: If a pointer names an unknown profile
        """
        self.invoker = invoker
        self._profiles: dict[str, ModelProfile] = {}
        for profile in DEFAULT_MODEL_PROFILES if profiles is None else profiles:
            self._profiles[profile.name] = profile.model_copy()

        pointers = pointers or DEFAULT_MODEL_POINTERS
        self._validate_pointers(pointers.model_dump())
        self._pointers = pointers.model_copy()

        if current is not None and current not in self._profiles:
            logger.warning("Unknown current model %s, falling back to %s", current, self._pointers.main)
            current = None
        self._current = current or self._pointers.main

    # =========================================================================
    # Profiles
    # =========================================================================

    def add_profile(self, profile: ModelProfile) -> None:
        self._profiles[profile.name] = profile
        logger.info("Added model profile: %s", profile.name)

    def remove_profile(self, name: str) -> bool:
        """
        Remove a profile.

        Pointers and the current model are not rewritten; if they named the
        removed profile, resolving them fails at use time.
        """
        removed = self._profiles.pop(name, None) is not None
        if removed:
            logger.info("Removed model profile: %s", name)
        return removed

    def get_profile(self, name: str) -> ModelProfile | None:
        return self._profiles.get(name)

    def list_profiles(self) -> list[ModelProfile]:
        return list(self._profiles.values())

    def available_model_names(self) -> list[str]:
        return list(self._profiles)

    # =========================================================================
    # Current model
    # =========================================================================

    @property
    def current_model(self) -> str:
        return self._current

    def current_profile(self) -> ModelProfile | None:
        return self._profiles.get(self._current)

    def set_current_model(self, name: str) -> bool:
        """Switch the current model; returns False (no change) for unknown names."""
        if name not in self._profiles:
            return False
        self._current = name
        logger.info("Switched to model: %s", name)
        return True

    # =========================================================================
    # Purpose pointers
    # =========================================================================

    def _validate_pointers(
        self, pointers: dict[str, Any], profiles: dict[str, ModelProfile] | None = None
    ) -> None:
        known = self._profiles if profiles is None else profiles
        for purpose, name in pointers.items():
            if purpose not in PURPOSES:
                raise InvalidOperationError(f"Unknown model purpose: {purpose}")
            if name not in known:
                raise NotFoundError("Model profile", name)

    def set_pointers(self, **pointers: str) -> None:
        """
        Reassign purpose pointers.

        Raises:
            NotFoundError: If any named profile is unknown (nothing is applied)
            InvalidOperationError: If a purpose is unknown
        """
        self._validate_pointers(pointers)
        self._pointers = self._pointers.model_copy(update=pointers)
        logger.info("Updated model pointers: %s", self._pointers.model_dump())

    def get_pointers(self) -> ModelPointers:
        return self._pointers.model_copy()

    def profile_for_purpose(self, purpose: ModelPurpose) -> ModelProfile:
        """
        Resolve a purpose pointer.

        Raises:
            NotFoundError: If the pointer names a profile that no longer exists
        """
        name = getattr(self._pointers, purpose)
        profile = self._profiles.get(name)
        if profile is None:
            raise NotFoundError("Model profile", name)
        return profile

    def switch_to_purpose(self, purpose: ModelPurpose) -> bool:
        name = getattr(self._pointers, purpose)
        if name not in self._profiles:
            return False
        self._current = name
        logger.info("Switched to %s model: %s", purpose, name)
        return True

    # =========================================================================
    # Dispatch
    # =========================================================================

    def resolve(self, model_name: str | None = None) -> ModelProfile:
        """
        Resolve an explicit model name, or the current model.

        Raises:
            NotFoundError: If the profile does not exist
        """
        target = model_name or self._current
        profile = self._profiles.get(target)
        if profile is None:
            raise NotFoundError("Model profile", target)
        return profile

    async def execute_with_model(
        self,
        prompt: str,
        model_name: str | None = None,
        options: InvokeOptions | None = None,
    ) -> str:
        """
        Run a prompt on a model profile.

        Args:
            prompt: The prompt text
            model_name: Explicit profile name (defaults to the current model)
            options: Per-call overrides

        Returns:
            The model's text response

        Raises:
            NotFoundError: If the profile cannot be resolved
        """
        profile = self.resolve(model_name)
        logger.debug("Executing with model %s: %.100s", profile.name, prompt)
        return await self.invoker.invoke(profile, prompt, options)

    async def execute_in_parallel(
        self, requests: Iterable[ParallelRequest | dict[str, Any]]
    ) -> list[ParallelResult]:
        """
        Run independent prompts concurrently.

        Every request yields one result; a failing request yields a result
        with ``error`` set and never cancels its siblings. Results are
        returned in submission order.
        """
        return list(await asyncio.gather(*(self._execute_one(request) for request in requests)))

    async def _execute_one(self, request: ParallelRequest | dict[str, Any]) -> ParallelResult:
        if not isinstance(request, ParallelRequest):
            try:
                request = ParallelRequest.model_validate(request)
            except ValidationError as e:
                name = request.get("model_name") if isinstance(request, dict) else None
                first = e.errors()[0]
                location = ".".join(str(part) for part in first["loc"]) or "request"
                logger.warning("Rejected parallel request %.200r: %s", request, first["msg"])
                return ParallelResult(
                    model=name if isinstance(name, str) else "",
                    error=f"Invalid request: {location}: {first['msg']}",
                )

        if request.model_name:
            model_name = request.model_name
        elif request.purpose:
            model_name = getattr(self._pointers, request.purpose)
        else:
            model_name = self._current

        try:
            response = await self.execute_with_model(request.prompt, model_name, request.options)
        except Exception as e:
            logger.warning("Parallel request on %s failed: %s", model_name, e)
            return ParallelResult(model=model_name, error=str(e))
        return ParallelResult(model=model_name, response=response)

    # =========================================================================
    # Export / Import
    # =========================================================================

    def export_config(self) -> dict[str, Any]:
        return {
            "modelProfiles": {name: p.model_dump(mode="json") for name, p in self._profiles.items()},
            "modelPointers": self._pointers.model_dump(),
            "currentModel": self._current,
        }

    def import_config(self, config: dict[str, Any]) -> None:
        """
        Replace profiles, pointers and current model from an exported config.

        An unknown ``currentModel`` is ignored. Nothing is applied if the
        profiles or pointers fail validation.

        Raises:
            NotFoundError: If a pointer names a profile missing from the import
        """
        profiles = self._profiles
        if "modelProfiles" in config:
            profiles = {
                name: ModelProfile.model_validate({**profile, "name": name})
                for name, profile in config["modelProfiles"].items()
            }
        pointers = self._pointers
        if "modelPointers" in config:
            pointers = ModelPointers.model_validate(config["modelPointers"])
            self._validate_pointers(pointers.model_dump(), profiles)

        self._profiles = profiles
        self._pointers = pointers
        current = config.get("currentModel")
        if current and current in self._profiles:
            self._current = current
        logger.info("Model configuration imported")

    @classmethod
    def from_config(cls, config: Any, invoker: ModelInvoker) -> "ModelRegistry":
        """Build a registry from a ``ModelsConfig``."""
        return cls(
            invoker=invoker,
            profiles=[profile.model_copy(update={"name": name}) for name, profile in config.profiles.items()],
            pointers=config.pointers,
            current=config.current,
        )
