"""Tagged resumption result: Ready | Pending.

Every resumption of a task (and every poll of a suspension primitive)
returns exactly one of these two variants. Suspension is never signalled
through exceptions or sentinel return values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ready:
    """The computation completed.

    ``value`` is the computation's output; zero-output computations
    complete with ``None``.
    """
    value: Any = None


@dataclass(frozen=True)
class Pending:
    """The computation is still suspended and must be resumed later."""


PENDING = Pending()

Poll = Ready | Pending


__all__ = ["Ready", "Pending", "PENDING", "Poll"]
