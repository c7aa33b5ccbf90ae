"""Configuration classes for the XML tree viewer.

This module provides configuration objects for every processing stage, from
ordered parsing through normalization, rendering and skeleton generation.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

MIXED_TEXT_POLICIES = ("join", "last")
DIAGRAM_DIRECTIONS = ("TD", "TB", "BT", "LR", "RL")
LOGGING_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_COMPONENTS = ("parser", "normalizer", "diagram", "skeleton", "session", "global_")


@dataclass
class ParserConfig:
    """Configuration for the ordered-item producer."""

    trim_values: bool = True
    load_external_dtd: bool = False
    keep_processing_instructions: bool = True


@dataclass
class NormalizerConfig:
    """Configuration for ordered-item normalization."""

    mixed_text: str = "join"  # join, last

    def __post_init__(self) -> None:
        """Validate normalizer configuration."""
        if self.mixed_text not in MIXED_TEXT_POLICIES:
            raise ValueError(f"mixed_text must be one of {list(MIXED_TEXT_POLICIES)}")


@dataclass
class DiagramConfig:
    """Configuration for Mermaid diagram generation."""

    direction: str = "TD"
    style_empty_nodes: bool = False
    root_style: str = "fill:#4a90d9,stroke:#2c5f8a,color:#fff,font-weight:bold"
    branch_style: str = "fill:#5ba85b,stroke:#3d7a3d,color:#fff"
    leaf_style: str = "fill:#f5a623,stroke:#c4841d,color:#fff"
    empty_style: str = "fill:#d0d0d0,stroke:#9a9a9a,color:#333"

    def __post_init__(self) -> None:
        """Validate diagram configuration."""
        if self.direction not in DIAGRAM_DIRECTIONS:
            raise ValueError(f"direction must be one of {list(DIAGRAM_DIRECTIONS)}")


@dataclass
class SkeletonConfig:
    """Configuration for DTD skeleton generation."""

    indent: str = "  "
    placeholder_text: str = "text"

    def __post_init__(self) -> None:
        """Validate skeleton configuration."""
        if self.indent.strip():
            raise ValueError("indent must contain only whitespace")


@dataclass
class SessionConfig:
    """Configuration for view sessions and chunked artifact transfer."""

    default_chunk_size: int = 65536
    transfer_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate session configuration."""
        if self.default_chunk_size <= 0:
            raise ValueError("default_chunk_size must be > 0")
        if self.transfer_timeout_seconds <= 0:
            raise ValueError("transfer_timeout_seconds must be > 0")


@dataclass
class GlobalConfig:
    """Global settings that apply across all components."""

    logging_level: str = "WARNING"
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {list(LOGGING_LEVELS)}")
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ViewerConfig:
    """Complete configuration for all viewer components.

    Immutable so one instance can be shared between sessions; use
    :meth:`override` to derive variants.
    """

    parser: ParserConfig = field(default_factory=ParserConfig)
    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    diagram: DiagramConfig = field(default_factory=DiagramConfig)
    skeleton: SkeletonConfig = field(default_factory=SkeletonConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-validate every component so mutated sub-configs are caught."""
        for component in _COMPONENTS:
            sub_config = getattr(self, component)
            validate = getattr(sub_config, "__post_init__", None)
            if validate is None:
                continue
            try:
                validate()
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=component) from e

    def override(self, **kwargs: Any) -> "ViewerConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, nested ones as ``component__field``

        Returns:
            New ViewerConfig instance with overrides applied

        Example:
            >>> config = ViewerConfig().override(
            ...     diagram__direction="LR",
            ...     normalizer__mixed_text="last",
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                # Longest match first so "global___x" resolves to global_
                component = next(
                    (name for name in sorted(_COMPONENTS, key=len, reverse=True)
                     if key.startswith(name + "__")),
                    key.split("__", 1)[0],
                )
                field_name = key[len(component) + 2:]
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component in _COMPONENTS:
            sub_config = getattr(self, component)
            result[component] = {
                name: getattr(sub_config, name)
                for name in sub_config.__dataclass_fields__
            }
        result["name"] = self.name
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewerConfig":
        """Create configuration from dictionary.

        Unknown top-level keys are rejected; missing components use defaults.
        """
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "name":
                field_values["name"] = value
                continue
            if key not in _COMPONENTS:
                raise ConfigValidationError(
                    f"Unknown configuration component: {key}",
                    field_name=key,
                    suggestions=list(_COMPONENTS),
                )
            component_class = cls.__dataclass_fields__[key].default_factory
            try:
                field_values[key] = component_class(**value)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=key) from e

        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ViewerConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ViewerConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def legacy(cls) -> "ViewerConfig":
        """Create a preset where the last text run of mixed content wins."""
        return cls(
            normalizer=NormalizerConfig(mixed_text="last"),
            name="legacy",
        )

    @classmethod
    def compact(cls) -> "ViewerConfig":
        """Create a preset with left-to-right diagrams and styled empty nodes."""
        return cls(
            diagram=DiagramConfig(direction="LR", style_empty_nodes=True),
            name="compact",
        )
