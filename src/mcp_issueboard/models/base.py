"""
Base models for the issue board API models.

This module provides the base class shared by the issue, sprint and user
models so that every model converts from store/provider records and back
to simplified dictionaries in the same way.
"""

from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from ..utils.date import parse_date

# Type variable for the return type of from_api_response
T = TypeVar("T", bound="ApiModel")


class ApiModel(BaseModel):
    """
    Base model for all API models with common conversion methods.

    This provides a standard interface for converting raw records to
    models and for converting models to simplified dictionaries for
    API responses.
    """

    @classmethod
    def from_api_response(cls: type[T], data: dict[str, Any], **kwargs: Any) -> T:
        """
        Convert a raw record to a model instance.

        Args:
            data: The raw record (camelCase keys, as stored)
            **kwargs: Additional context parameters

        Returns:
            An instance of the model

        Raises:
            NotImplementedError: If the subclass does not implement this method
        """
        raise NotImplementedError("Subclasses must implement from_api_response")

    def to_simplified_dict(self) -> dict[str, Any]:
        """
        Convert the model to a simplified dictionary for API responses.

        Returns:
            A dictionary with only the essential fields for API responses
        """
        return self.model_dump(exclude_none=True)


class TimestampMixin:
    """
    Mixin for handling record timestamps.
    """

    @staticmethod
    def coerce_timestamp(value: Any) -> datetime | None:
        """
        Coerce a stored timestamp into a datetime.

        Args:
            value: A datetime, an ISO 8601 string, an epoch in milliseconds or None

        Returns:
            The parsed datetime, or None if the value is empty or unparseable
        """
        try:
            return parse_date(value)
        except (ValueError, TypeError, OverflowError):
            return None

    @staticmethod
    def format_timestamp(value: datetime | None) -> str | None:
        """
        Format a timestamp for JSON output.

        Args:
            value: The datetime to format

        Returns:
            An ISO 8601 string, or None when no timestamp is set
        """
        if value is None:
            return None
        return value.isoformat()
