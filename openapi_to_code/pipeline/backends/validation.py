"""
Validation annotation dialects for the Kotlin backend.

javax and jakarta share annotation names and differ only by package;
no_validation emits nothing.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..analyzer.default_coercer import kotlin_string
from ..analyzer.ir_nodes import AdditionalPropertiesCapture, PropertyDescriptor
from ..config import ValidationLibrary


@dataclass(frozen=True)
class Annotation:
    """One annotation and the import it needs."""

    text: str
    import_name: str


def _format_bound(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ValidationAnnotations:
    """Maps property constraints to bean validation annotations."""

    def __init__(self, package: str | None):
        """
        Args:
            package: Root package of the annotations, None to emit none
        """
        self.package = package

    @classmethod
    def for_library(cls, library: ValidationLibrary) -> ValidationAnnotations:
        if library == ValidationLibrary.NO_VALIDATION:
            return cls(None)
        return cls(f"{library.value}.validation")

    @property
    def enabled(self) -> bool:
        return self.package is not None

    def _constraint(self, name: str, arguments: str = "") -> Annotation:
        text = f"@get:{name}({arguments})" if arguments else f"@get:{name}"
        return Annotation(text=text, import_name=f"{self.package}.constraints.{name}")

    def not_null(self) -> Annotation:
        return self._constraint("NotNull")

    def pattern(self, regex: str) -> Annotation:
        return self._constraint("Pattern", f"regexp = {kotlin_string(regex)}")

    def size(self, minimum: int | None, maximum: int | None) -> Annotation:
        bounds = []
        if minimum is not None:
            bounds.append(f"min = {minimum}")
        if maximum is not None:
            bounds.append(f"max = {maximum}")
        return self._constraint("Size", ", ".join(bounds))

    def decimal_min(self, value: float, exclusive: bool) -> Annotation:
        return self._constraint("DecimalMin", f'value = "{_format_bound(value)}", inclusive = {"false" if exclusive else "true"}')

    def decimal_max(self, value: float, exclusive: bool) -> Annotation:
        return self._constraint("DecimalMax", f'value = "{_format_bound(value)}", inclusive = {"false" if exclusive else "true"}')

    def valid(self) -> Annotation:
        return Annotation(text="@get:Valid", import_name=f"{self.package}.Valid")

    def for_property(self, prop: PropertyDescriptor) -> list[Annotation]:
        """
        Annotations validating one property.

        Args:
            prop: The classified property

        Returns:
            Annotations in emission order (empty when validation is disabled)
        """
        if not self.enabled or isinstance(prop, AdditionalPropertiesCapture):
            return []

        annotations = []
        if prop.is_mandatory:
            annotations.append(self.not_null())

        constraints = prop.constraints
        if constraints.pattern is not None:
            annotations.append(self.pattern(constraints.pattern))
        if constraints.min_length is not None or constraints.max_length is not None:
            annotations.append(self.size(constraints.min_length, constraints.max_length))
        if constraints.min_items is not None or constraints.max_items is not None:
            annotations.append(self.size(constraints.min_items, constraints.max_items))
        if constraints.minimum is not None:
            annotations.append(self.decimal_min(constraints.minimum, constraints.exclusive_minimum))
        if constraints.maximum is not None:
            annotations.append(self.decimal_max(constraints.maximum, constraints.exclusive_maximum))

        if prop.type_ref.is_complex:
            annotations.append(self.valid())
        return annotations
