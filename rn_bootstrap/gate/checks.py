"""Compatibility gates.

Runs every rule in the registry, in registry order, and stops at the first
failure.  The gate never writes anything; a failure surfaces as
``EnvironmentGateFailure`` naming the offending tool and its required bound.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Union

from rn_bootstrap.errors import EnvironmentGateFailure, MalformedVersion
from rn_bootstrap.gate.probe import ProbeResult, ToolProbe
from rn_bootstrap.gate.version import Ordering, compare

if TYPE_CHECKING:
    from rn_bootstrap.config import (
        CompatibilityRegistry,
        CompatibilityRule,
        VersionRange,
    )


class GateFailureReason(str, Enum):
    NOT_FOUND = "not_found"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class GateFailure:
    """Why a single tool failed its gate."""

    tool: str
    reason: GateFailureReason
    required: VersionRange
    detected: str | None = None
    direction: str | None = None  # "below" or "above" for OUT_OF_RANGE
    source: str = "probe"

    def describe(self) -> str:
        if self.reason is GateFailureReason.NOT_FOUND and self.source == "target":
            return (
                f"The requested {self.tool} version {self.detected!r} is not a valid version; "
                f"supported versions are {self.required.describe()}"
            )
        if self.reason is GateFailureReason.NOT_FOUND:
            got = f" (got {self.detected!r})" if self.detected else ""
            return (
                f"{self.tool} was not found or reported no parseable version{got}; "
                f"required {self.required.describe()}"
            )
        if self.required.maximum is None:
            bound = self.required.label or self.required.minimum
            return (
                f"The minimum supported {self.tool} version is {bound} "
                f"(detected {self.detected})"
            )
        return (
            f"The supported {self.tool} version is {self.required.describe()} "
            f"(detected {self.detected})"
        )


def evaluate_rule(rule: CompatibilityRule, detected: str | None) -> GateFailure | None:
    """Check *detected* against *rule*; return ``None`` when it passes."""
    bounds = rule.bounds

    def fail(reason: GateFailureReason, direction: str | None = None) -> GateFailure:
        return GateFailure(rule.tool_key, reason, bounds, detected, direction, rule.source)

    if detected is None:
        return fail(GateFailureReason.NOT_FOUND)

    try:
        if compare(detected, bounds.minimum, prefix_only=bounds.prefix_only) is Ordering.LESS:
            return fail(GateFailureReason.OUT_OF_RANGE, "below")
        if (
            bounds.maximum is not None
            and compare(detected, bounds.maximum, prefix_only=bounds.prefix_only)
            is Ordering.GREATER
        ):
            return fail(GateFailureReason.OUT_OF_RANGE, "above")
    except MalformedVersion:
        return fail(GateFailureReason.NOT_FOUND)

    return None


TargetVersion = Union[str, Callable[[], Awaitable[str]]]


class CompatibilityGate:
    """Approves or rejects the run before any mutation happens.

    The registry is injected so tests can drive the gate with synthetic
    bounds and a fake probe.
    """

    def __init__(self, registry: CompatibilityRegistry, probe: ToolProbe) -> None:
        self.registry = registry
        self.probe = probe

    async def check_all(self, target_version: TargetVersion) -> list[ProbeResult]:
        """Evaluate every rule in registry order, failing fast.

        Args:
            target_version: The requested framework version, or a coroutine
                function that resolves it.  A resolver is only awaited once
                every rule ahead of the framework rule has passed, so a
                broken host runtime is reported before any version lookup.

        Returns:
            The probe results of all passing tools, in evaluation order.

        Raises:
            EnvironmentGateFailure: On the first tool that is missing or out
                of range.
        """
        results: list[ProbeResult] = []
        for rule in self.registry.rules():
            if rule.source == "target":
                if callable(target_version):
                    target_version = await target_version()
                result = ProbeResult(tool_key=rule.tool_key, detected=target_version)
            else:
                result = await self.probe.probe(
                    rule.tool_key, prefix_only=rule.bounds.prefix_only
                )

            failure = evaluate_rule(rule, result.detected)
            if failure is not None:
                raise EnvironmentGateFailure(failure)
            results.append(result)
        return results
