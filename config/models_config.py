"""ModelsConfig model."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from core.models import ModelPointers, ModelProfile

from .defaults import DEFAULT_INVOKER, DEFAULT_MODEL_POINTERS, DEFAULT_MODEL_PROFILES


def _default_profiles() -> dict[str, ModelProfile]:
    return {profile.name: profile.model_copy() for profile in DEFAULT_MODEL_PROFILES}


class ModelsConfig(BaseModel):
    """
    Model profiles, purpose pointers and the invoker backend.

    Configured profiles are added to (or replace) the built-in profiles of
    the same name; configured pointers override the built-in pointers one
    purpose at a time.
    """

    profiles: dict[str, ModelProfile] = Field(
        default_factory=_default_profiles,
        description="Model profiles by name",
    )
    pointers: ModelPointers = Field(
        default_factory=lambda: DEFAULT_MODEL_POINTERS.model_copy(),
        description="Profile used for each purpose",
    )
    current: str | None = Field(
        default=None,
        description="Initial current model (defaults to the main pointer)",
    )
    invoker: Literal["simulated", "pydantic_ai"] = Field(
        default=DEFAULT_INVOKER,
        description="Backend that runs model prompts",
    )

    @field_validator("profiles", mode="before")
    @classmethod
    def merge_with_builtin_profiles(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        merged: dict[str, Any] = {name: p.model_dump() for name, p in _default_profiles().items()}
        for name, profile in value.items():
            if isinstance(profile, ModelProfile):
                profile = profile.model_dump()
            if isinstance(profile, dict):
                profile = {**profile, "name": name}
            merged[name] = profile
        return merged

    @field_validator("pointers", mode="before")
    @classmethod
    def merge_with_builtin_pointers(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {**DEFAULT_MODEL_POINTERS.model_dump(), **value}
        return value

    @model_validator(mode="after")
    def check_references(self) -> "ModelsConfig":
        for purpose, name in self.pointers.model_dump().items():
            if name not in self.profiles:
                raise ValueError(f"Pointer {purpose!r} names unknown model profile {name!r}")
        if self.current is not None and self.current not in self.profiles:
            raise ValueError(f"Current model {self.current!r} is not a configured profile")
        return self
