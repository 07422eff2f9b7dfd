"""Bootstrap configuration.

Typed configuration for a single bootstrap run.  All settings use Pydantic v2
models so they are validated at construction time:

* ``Config`` -- tuneable knobs (generator command, template root, npm
  registry, packager port, auxiliary dev dependencies), optionally read from
  ``RN_BOOTSTRAP_*`` environment variables.
* ``CompatibilityRegistry`` -- the static tool → supported-version mapping,
  loaded once from ``data/compatibility.json`` and never mutated.
* ``ProjectContext`` -- the immutable description of the project being
  created, threaded through every stage after input parsing.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rn_bootstrap.gate.version import Ordering, compare, parse_version

_PACKAGE_DIR = Path(__file__).parent
DEFAULT_REGISTRY_PATH = _PACKAGE_DIR / "data" / "compatibility.json"
DEFAULT_TEMPLATE_DIR = _PACKAGE_DIR / "scaffolder" / "templates"

DEFAULT_DEV_DEPENDENCIES: list[str] = ["ajv", "eslint", "@types/react-native", "@types/react"]


# ---------------------------------------------------------------------------
# Compatibility registry
# ---------------------------------------------------------------------------


class VersionRange(BaseModel):
    """Inclusive ``[minimum, maximum]`` bound; ``maximum=None`` means unbounded."""

    model_config = ConfigDict(frozen=True)

    minimum: str
    maximum: str | None = None
    label: str | None = Field(
        default=None,
        description="Human-facing name of the bound when it differs from the raw version",
    )
    prefix_only: bool = Field(
        default=False,
        description="Compare only the numeric prefix before the first underscore",
    )

    @field_validator("minimum", "maximum")
    @classmethod
    def _parseable(cls, value: str | None) -> str | None:
        if value is not None:
            parse_version(value)
        return value

    @model_validator(mode="after")
    def _ordered(self) -> "VersionRange":
        if self.maximum is not None and compare(self.minimum, self.maximum) is Ordering.GREATER:
            raise ValueError(f"minimum {self.minimum} is greater than maximum {self.maximum}")
        return self

    def describe(self) -> str:
        if self.maximum is None:
            return f">= {self.label or self.minimum}"
        return f"between {self.minimum} and {self.maximum}"


class CompatibilityRule(BaseModel):
    """One gate: which tool, which bounds, and where its version comes from."""

    model_config = ConfigDict(frozen=True)

    tool_key: str
    bounds: VersionRange
    source: Literal["probe", "target"] = "probe"


class CompatibilityRegistry(BaseModel):
    """Static mapping of tool name to supported version bounds.

    Also carries the Android SDK and iOS cache lists consumed by the
    placeholder substitutions.
    """

    model_config = ConfigDict(frozen=True)

    node: VersionRange
    react_native: VersionRange
    xcode: VersionRange
    java: VersionRange
    android_sdk_platforms: list[str] = Field(default_factory=list)
    android_sdk_tools: list[str] = Field(default_factory=list)
    android_avd_package: str = ""
    ios_rncache: list[str] = Field(default_factory=list)

    @field_validator("java")
    @classmethod
    def _java_prefix_only(cls, value: VersionRange) -> VersionRange:
        # JDK 8 reports versions like 1.8.0_202.
        if not value.prefix_only:
            return value.model_copy(update={"prefix_only": True})
        return value

    def rules(self) -> list[CompatibilityRule]:
        """Return the gates in evaluation order."""
        return [
            CompatibilityRule(tool_key="node", bounds=self.node),
            CompatibilityRule(tool_key="react-native", bounds=self.react_native, source="target"),
            CompatibilityRule(tool_key="xcode", bounds=self.xcode),
            CompatibilityRule(tool_key="java", bounds=self.java),
        ]

    @classmethod
    def load(cls, path: Path | None = None) -> "CompatibilityRegistry":
        """Load the registry from JSON (the bundled file when *path* is ``None``)."""
        raw = Path(path or DEFAULT_REGISTRY_PATH).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


# ---------------------------------------------------------------------------
# Project context
# ---------------------------------------------------------------------------


class ProjectContext(BaseModel):
    """Immutable description of the project being bootstrapped."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    target_version: str
    use_npm: bool = False
    working_directory: Path = Field(
        ..., description="Directory the generator runs in; the project is created beneath it"
    )

    @property
    def project_dir(self) -> Path:
        """Root of the generated project."""
        return self.working_directory / self.name


# ---------------------------------------------------------------------------
# Runtime configuration
# ---------------------------------------------------------------------------


class Config(BaseModel):
    """Tuneable settings for a bootstrap run."""

    generator_command: str = Field(default="react-native")
    registry_path: Path | None = Field(default=None)
    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    npm_registry_url: str = Field(default="https://registry.npmjs.org")
    http_timeout: int = Field(default=15, ge=1, description="npm registry timeout in seconds")
    packager_port: int = Field(default=8081, ge=1, le=65535)
    dev_dependencies: list[str] = Field(default_factory=lambda: list(DEFAULT_DEV_DEPENDENCIES))

    @property
    def start_script(self) -> str:
        """The ``npm start`` command injected into the generated manifest."""
        return f"sh shell/start.sh {self.packager_port}"

    def load_registry(self) -> CompatibilityRegistry:
        return CompatibilityRegistry.load(self.registry_path)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            RN_BOOTSTRAP_GENERATOR, RN_BOOTSTRAP_REGISTRY,
            RN_BOOTSTRAP_TEMPLATE_DIR, RN_BOOTSTRAP_NPM_REGISTRY,
            RN_BOOTSTRAP_HTTP_TIMEOUT, RN_BOOTSTRAP_PACKAGER_PORT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("RN_BOOTSTRAP_GENERATOR"):
            kwargs["generator_command"] = os.environ["RN_BOOTSTRAP_GENERATOR"]
        if os.environ.get("RN_BOOTSTRAP_REGISTRY"):
            kwargs["registry_path"] = Path(os.environ["RN_BOOTSTRAP_REGISTRY"])
        if os.environ.get("RN_BOOTSTRAP_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["RN_BOOTSTRAP_TEMPLATE_DIR"])
        if os.environ.get("RN_BOOTSTRAP_NPM_REGISTRY"):
            kwargs["npm_registry_url"] = os.environ["RN_BOOTSTRAP_NPM_REGISTRY"]
        if os.environ.get("RN_BOOTSTRAP_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = int(os.environ["RN_BOOTSTRAP_HTTP_TIMEOUT"])
        if os.environ.get("RN_BOOTSTRAP_PACKAGER_PORT"):
            kwargs["packager_port"] = int(os.environ["RN_BOOTSTRAP_PACKAGER_PORT"])
        return cls(**kwargs)
