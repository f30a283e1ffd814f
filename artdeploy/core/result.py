"""Ok / Err values for failures a caller is expected to handle.

Collaborators (config loading, fetching, extraction, subprocesses) return a
Result instead of raising. The lifecycle is the one place that decides
which Err aborts a run; it turns those into DeployAborted.

    match fetcher.fetch(location, dest, checksum):
        case Ok(fetched):
            use(fetched.path)
        case Err(error):
            raise DeployAborted(FetchFailed(location=error.location, reason=error.message))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeGuard


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    return isinstance(result, Err)
