"""
Concrete collaborators for the adapter core.

Tool executors and model invokers that satisfy the protocols in
``core.collaborators``.
"""

from .local_tools import LocalToolExecutor
from .pydantic_ai_invoker import PydanticAIInvoker, model_string
from .simulated import SimulatedInvoker
from .web_fetch import MAX_RESPONSE_SIZE, fetch_url

__all__ = [
    "LocalToolExecutor",
    "SimulatedInvoker",
    "PydanticAIInvoker",
    "model_string",
    "fetch_url",
    "MAX_RESPONSE_SIZE",
]
