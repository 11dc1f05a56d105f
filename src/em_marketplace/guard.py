"""ReentrancyGuard — one flag per engine instance, entered by every mutating entry point."""

from types import TracebackType

from src.em_common.errors import ReentrancyError


class ReentrancyGuard:
    def __init__(self) -> None:
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    def __enter__(self) -> "ReentrancyGuard":
        if self._entered:
            raise ReentrancyError()
        self._entered = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._entered = False
