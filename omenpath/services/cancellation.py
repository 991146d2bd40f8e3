"""
Cooperative cancellation for long-running conversions.

A CancellationToken is threaded through every external request. Setting it
does not interrupt an in-flight request; the next request boundary raises
ConversionCancelled instead.
"""

from omenpath.models.failure import ConversionCancelled


class CancellationToken:
    """Flag checked at every request boundary."""

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str | None = None) -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ConversionCancelled(detail=self.reason)
