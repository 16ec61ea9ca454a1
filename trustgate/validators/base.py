"""
Base Validator Module

Abstract base class and common validation utilities.

PATTERN: Template Method
------------------------
The BaseValidator provides common validation infrastructure while allowing
subclasses to implement specific validation logic. Everything a validator
inspects (remote responses, user text, uploaded bytes) is treated as hostile
until it passes.
"""

import re
from abc import ABC, abstractmethod
from re import Pattern
from typing import Any

from trustgate.core.exceptions import ValidationError


class BaseValidator(ABC):
    """
    Abstract base validator with common validation utilities.

    Provides reusable validation methods that all validators can use:
    - Emptiness checks
    - Pattern screening (first match wins)

    Subclasses implement specific validation logic for their domain.
    """

    def validate_not_empty(self, value: str, field_name: str) -> None:
        """
        Validate string is not empty or whitespace-only.

        Raises:
            ValidationError: If value is empty or whitespace
        """
        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty", details={"field": field_name})

    @staticmethod
    def first_match(value: str, patterns: list[tuple[Pattern, Any, str]]) -> tuple[Any, str] | None:
        """
        Return (tag, description) of the first pattern found in value.

        Patterns are (compiled regex, tag, description) triples checked in order.
        """
        for pattern, tag, description in patterns:
            if pattern.search(value):
                return tag, description
        return None

    @abstractmethod
    def validate(self, *args, **kwargs) -> Any:
        """
        Validate input data.

        ABSTRACT METHOD: Subclasses must implement

        Example:
            class PromptValidator(BaseValidator):
                def validate(self, prompt: str) -> None:
                    self.validate_not_empty(prompt, "prompt")
        """
        pass


def compile_pattern(expression: str, flags: int = re.IGNORECASE) -> Pattern:
    return re.compile(expression, flags)
