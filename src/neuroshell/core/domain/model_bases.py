"""Nominal marker base classes for model standardization.

`DomainModel` is the base for Pydantic-based domain and configuration models.
"""

from __future__ import annotations

from pydantic import BaseModel


class DomainModel(BaseModel):
    """Nominal marker for Pydantic-based domain models."""

    def __repr__(self) -> str:
        """Provide a concise, one-line summary of the object."""
        class_name = self.__class__.__name__
        for attr in ("id", "name"):
            attr_value = getattr(self, attr, None)
            if attr_value is not None:
                return f'<{class_name} {attr}="{attr_value}">'
        return f"<{class_name}>"
