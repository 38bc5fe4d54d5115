"""Model profile, pointer and dispatch models."""

from typing import Literal

from pydantic import BaseModel, Field

ModelPurpose = Literal["main", "task", "reasoning", "quick"]


class ModelCost(BaseModel):
    input: float
    output: float
    currency: str = "USD"


class ModelProfile(BaseModel):
    """One addressable language-model backend."""

    name: str
    provider: str
    model: str
    api_key: str | None = None
    base_url: str | None = None
    max_tokens: int = 4096
    temperature: float = 0.3
    context_window: int = 200000
    cost: ModelCost | None = None


class ModelPointers(BaseModel):
    """Purpose slots, each naming a model profile."""

    main: str = Field(description="Default model for the main conversation")
    task: str = Field(description="Default model for sub-agents")
    reasoning: str = Field(description="Default model for reasoning tasks")
    quick: str = Field(description="Default model for quick tasks")


class InvokeOptions(BaseModel):
    temperature: float | None = None
    max_tokens: int | None = None
    system_prompt: str | None = None


class ParallelRequest(BaseModel):
    """One entry of a parallel model batch."""

    prompt: str
    model_name: str | None = None
    purpose: ModelPurpose | None = None
    options: InvokeOptions | None = None


class ParallelResult(BaseModel):
    model: str
    response: str = ""
    error: str | None = None
