import enum
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

S = TypeVar("S")
T = TypeVar("T")


class MutationState(str, enum.Enum):
    pending = "pending"
    applying = "applying"
    committed = "committed"
    rolled_back = "rolled_back"


class OptimisticMutation(Generic[S]):
    """Apply a local change, run the remote call, then commit or restore.

    ``apply`` mutates local state and returns whatever ``restore`` needs to undo
    it. That snapshot is held only while the remote call is in flight.
    """

    def __init__(self, apply: Callable[[], S], restore: Callable[[S], None]):
        self._apply = apply
        self._restore = restore
        self._snapshot: S | None = None
        self.state = MutationState.pending

    async def run(self, remote: Callable[[], Awaitable[T]]) -> T:
        if self.state is not MutationState.pending:
            raise RuntimeError(f"Mutation already {self.state.value}")

        self._snapshot = self._apply()
        self.state = MutationState.applying
        try:
            result = await remote()
        except Exception:
            self._restore(self._snapshot)
            self.state = MutationState.rolled_back
            raise
        finally:
            self._snapshot = None

        self.state = MutationState.committed
        return result
