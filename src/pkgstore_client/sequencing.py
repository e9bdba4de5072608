"""
Monotonic sequence numbers for last-writer-wins state updates.
"""

import itertools


class SequenceCounter:
    """Hands out strictly increasing tickets, starting at 1"""

    def __init__(self):
        self._counter = itertools.count(1)
        self._last = 0

    def issue(self) -> int:
        self._last = next(self._counter)
        return self._last

    @property
    def last_issued(self) -> int:
        return self._last


class SequenceGuard:
    """
    Tracks the newest applied ticket.

    An update may only be applied if its ticket is newer than the last one
    applied; older tickets belong to superseded operations and are dropped.
    """

    def __init__(self, counter: SequenceCounter = None):
        self.counter = counter or SequenceCounter()
        self._applied = 0

    def issue(self) -> int:
        return self.counter.issue()

    def accept(self, ticket: int) -> bool:
        """Mark ticket as applied if it is the newest seen so far"""
        if ticket <= self._applied:
            return False
        self._applied = ticket
        return True

    @property
    def applied(self) -> int:
        return self._applied
