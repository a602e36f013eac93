"""
Shared run infrastructure: context, cancellation and the base manager.
"""

from .cancellation import CancellationToken
from .context import RunContext

__all__ = [
    "CancellationToken",
    "RunContext",
]
