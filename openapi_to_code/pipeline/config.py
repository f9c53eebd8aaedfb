"""
Configuration for the OpenAPI type model pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ValidationLibrary(str, Enum):
    """Validation annotation dialect used by the Kotlin backend."""

    JAVAX = "javax"
    JAKARTA = "jakarta"
    NO_VALIDATION = "no_validation"


class DiscriminatorPolicy(str, Enum):
    """How to treat a subtype selected by several discriminator values.

    Subtypes with exactly one value always get a fixed discriminator.
    """

    SETTABLE = "settable"  # Default: keep the discriminator as a normal field
    ERROR = "error"  # Reject the document


@dataclass
class CodeGeneratorConfig:
    """Configuration options for type model building and code generation."""

    # Wrap optional properties in a tri-state container (JSON Merge Patch)
    merge_patch: bool = False

    # Validation annotations to emit
    validation_library: ValidationLibrary = ValidationLibrary.JAVAX

    # Behaviour for subtypes with several discriminator values
    discriminator_policy: DiscriminatorPolicy = DiscriminatorPolicy.SETTABLE

    # Kotlin package of the generated models
    package_name: str = "models"

    # Schemas to leave out of the generated code
    ignore_classes: list[str] = field(default_factory=list)

    # Order in which to generate classes (empty = document order)
    order_classes: list[str] = field(default_factory=list)

    # Worker threads used to resolve top-level schemas (1 = sequential)
    max_workers: int = 1

    # Add generation comment at top of file
    add_generation_comment: bool = True

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "validation_library":
                config.validation_library = ValidationLibrary(v)
            elif k == "discriminator_policy":
                config.discriminator_policy = DiscriminatorPolicy(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "merge_patch": self.merge_patch,
            "validation_library": self.validation_library.value,
            "discriminator_policy": self.discriminator_policy.value,
            "package_name": self.package_name,
            "ignore_classes": self.ignore_classes,
            "order_classes": self.order_classes,
            "max_workers": self.max_workers,
            "add_generation_comment": self.add_generation_comment,
        }
