"""
Session state shared by the trigger, coordinator and acceptance stages.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from compline.completion.coordinator import RequestBatch


@dataclass
class SessionContext:
    """
    Mutable completion state of one editable surface.

    ``cursor`` is (row, start_col) of the last popup, 0-indexed. It survives
    reset() because acceptance needs it after the popup has closed.
    """

    cursor: Optional[Tuple[int, int]] = None
    last_request_time: Optional[float] = None
    pending_requests: List[RequestBatch] = field(default_factory=list)
    is_incomplete: bool = False
    server_boundary: Optional[int] = None

    def cancel_pending(self) -> None:
        """Cancel every outstanding request batch."""
        for batch in self.pending_requests:
            batch.cancel()
        self.pending_requests = []

    def reset(self) -> None:
        """Forget pending state; the cursor is kept."""
        self.cancel_pending()
        self.is_incomplete = False
        self.last_request_time = None
        self.server_boundary = None

    def teardown(self) -> None:
        """Reset, including the cursor (leaving insertion)."""
        self.cursor = None
        self.reset()
