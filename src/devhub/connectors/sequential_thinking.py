"""
Sequential Thinking Connector - structured reasoning chains.

Chains are kept in memory for the lifetime of the connection and keyed
by a short id. Disconnecting drops them.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from ..contracts import CredentialField
from ..errors import ConnectorUnavailableError
from ..models import ServiceKind
from ..tools import Tool
from .base import ApiKeyConnector

__all__ = ["SequentialThinkingConnector", "TOOLS"]


def _steps(problem: str, approach: str | None = None) -> list[dict[str, Any]]:
    return [
        {
            "step": 1,
            "description": "Problem Analysis",
            "reasoning": f"Breaking down: {problem}",
            "conclusion": "Problem understood and decomposed",
        },
        {
            "step": 2,
            "description": "Approach Selection",
            "reasoning": approach or "Selecting optimal approach based on problem type",
            "conclusion": "Approach determined",
        },
        {
            "step": 3,
            "description": "Solution Development",
            "reasoning": "Developing structured solution",
            "conclusion": "Solution framework created",
        },
        {
            "step": 4,
            "description": "Validation",
            "reasoning": "Validating solution against problem requirements",
            "conclusion": "Solution validated",
        },
    ]


def _confidence(steps: list[dict]) -> float:
    return round(min(0.99, 0.6 + min(0.3, len(steps) * 0.05)), 2)


def _conclusion(steps: list[dict]) -> str:
    if not steps:
        return "No steps to synthesize"
    return "Reasoning chain complete: " + " -> ".join(s["conclusion"] for s in steps)


class SequentialThinkingConnector(ApiKeyConnector):
    kind = ServiceKind.SEQUENTIAL_THINKING
    display_name = "Sequential Thinking"
    min_key_length = 10
    credential_fields = (
        CredentialField("api_key", "SEQUENTIAL_THINKING_API_KEY", "Sequential Thinking API key"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.chains: dict[str, dict[str, Any]] = {}

    async def _close(self) -> None:
        self.chains.clear()

    def _chain(self, problem: str, steps: list[dict]) -> dict[str, Any]:
        return {
            "id": uuid.uuid4().hex[:8],
            "problem": problem,
            "steps": steps,
            "final_conclusion": _conclusion(steps),
            "confidence": _confidence(steps),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def _get(self, chain_id: str) -> dict[str, Any]:
        self._require_connected()
        chain = self.chains.get(chain_id)
        if chain is None:
            raise ConnectorUnavailableError(self.kind.value, f"Thinking chain not found: {chain_id}")
        return chain

    async def solve(self, problem: str) -> dict[str, Any]:
        self._require_connected()
        chain = self._chain(problem, _steps(problem))
        self.chains[chain["id"]] = chain
        return chain

    async def revise_step(self, chain_id: str, step: int, reasoning: str) -> dict[str, Any]:
        chain = self._get(chain_id)
        if 0 < step <= len(chain["steps"]):
            chain["steps"][step - 1]["reasoning"] = reasoning
        chain["final_conclusion"] = _conclusion(chain["steps"])
        chain["confidence"] = _confidence(chain["steps"])
        return chain

    async def analyze_alternative(self, problem: str, approach: str) -> dict[str, Any]:
        self._require_connected()
        return self._chain(f"{problem} (Alternative: {approach})", _steps(problem, approach))

    async def backtrack(self, chain_id: str, step: int) -> dict[str, Any]:
        """Keep the steps before `step`, drop the rest."""
        chain = self._get(chain_id)
        chain["steps"] = chain["steps"][: max(step - 1, 0)]
        chain["final_conclusion"] = _conclusion(chain["steps"])
        chain["confidence"] = _confidence(chain["steps"])
        return chain


class SolveWithReasoning(Tool):
    """Break a problem into a numbered reasoning chain."""

    problem: str = Field(..., min_length=1, description="Problem statement")

    async def execute(self, connector: SequentialThinkingConnector) -> Any:
        return await connector.solve(self.problem)


class ReviseStep(Tool):
    """Replace the reasoning of one step in a chain."""

    chain_id: str = Field(..., description="Chain id returned by solve_with_reasoning")
    step: int = Field(..., ge=1, description="Step number (1-based)")
    reasoning: str = Field(..., min_length=1, description="New reasoning")

    async def execute(self, connector: SequentialThinkingConnector) -> Any:
        return await connector.revise_step(self.chain_id, self.step, self.reasoning)


class AnalyzeAlternative(Tool):
    """Reason about a problem with an alternative approach."""

    problem: str = Field(..., min_length=1, description="Problem statement")
    approach: str = Field(..., min_length=1, description="Alternative approach")

    async def execute(self, connector: SequentialThinkingConnector) -> Any:
        return await connector.analyze_alternative(self.problem, self.approach)


class BacktrackAndRevise(Tool):
    """Drop every step from the given step onwards."""

    chain_id: str = Field(..., description="Chain id")
    step: int = Field(..., ge=1, description="First step to drop")

    async def execute(self, connector: SequentialThinkingConnector) -> Any:
        return await connector.backtrack(self.chain_id, self.step)


TOOLS = (SolveWithReasoning, ReviseStep, AnalyzeAlternative, BacktrackAndRevise)
