"""
Code generation backends.
"""

from __future__ import annotations

from .base import CodeBackend
from .kotlin_backend import KotlinBackend
from .validation import Annotation, ValidationAnnotations

__all__ = [
    "CodeBackend",
    "KotlinBackend",
    "Annotation",
    "ValidationAnnotations",
]
