"""Base classes for configuration and state models.

This module contains the foundational classes used throughout
baladocs:
- Closeable Protocol for resource cleanup
- BaseCloseable for automatic cleanup cascade
- BaseConfig for configuration models
- BaseState for per-request runtime state models

Kept separate from config.py and log.py so both can import it.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable children.

    Subclasses become context managers. On close() every field
    implementing Closeable is closed in declaration order; a
    failing child does not stop the remaining ones.

    Request teardown therefore reads:
    BuildState.__exit__() -> Workspace.close() -> release()
    """

    def close(self):
        """Close all closeable child objects.

        Errors are reported on stderr, never raised.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    msg = f"Warning: Error closing {field_name}: {e}"
                    print(msg, file=sys.stderr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections (YAML/env/CLI)."""
    pass


class BaseState(BaseCloseable):
    """Marker base for state that lives for one build request."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
