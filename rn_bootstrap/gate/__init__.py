"""Environment compatibility gates.

Probes the host toolchain, compares the detected versions against the
compatibility registry, and rejects the run before anything is written.

Quick usage::

    from rn_bootstrap.gate import CompatibilityGate, ToolProbe

    gate = CompatibilityGate(registry, ToolProbe(runner))
    results = await gate.check_all("0.59.10")
"""

from rn_bootstrap.gate.checks import CompatibilityGate, GateFailure, GateFailureReason
from rn_bootstrap.gate.probe import ProbeResult, ToolProbe
from rn_bootstrap.gate.version import Ordering, compare, parse_version

__all__ = [
    "CompatibilityGate",
    "GateFailure",
    "GateFailureReason",
    "Ordering",
    "ProbeResult",
    "ToolProbe",
    "compare",
    "parse_version",
]
