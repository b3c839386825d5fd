"""
Short-circuiting folds over AST and IR trees.

A step function receives a node and the current state and answers with
``Continue(new_state)`` to keep walking or ``Halt(result)`` to stop the whole
walk. Both trees expose ``children()``, so the same fold serves both.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

S = TypeVar("S")
R = TypeVar("R")


@dataclass(frozen=True)
class Continue(Generic[S]):
    """Keep folding with ``state``."""
    state: S


@dataclass(frozen=True)
class Halt(Generic[R]):
    """Stop folding and report ``result``."""
    result: R


Signal = Union[Continue, Halt]

_EXHAUSTED = object()


def fold(node: Any, step: Callable[[Any, Any], Signal], state: Any) -> Signal:
    """Pre-order fold of ``step`` over ``node`` and its descendants."""
    # One iterator per open node; the walk depth is not bounded by the call stack
    pending = [iter((node,))]
    while pending:
        current = next(pending[-1], _EXHAUSTED)
        if current is _EXHAUSTED:
            pending.pop()
            continue

        signal = step(current, state)
        if isinstance(signal, Halt):
            return signal
        state = signal.state
        pending.append(iter(current.children()))

    return Continue(state)


def find_first(node: Any, predicate: Callable[[Any], bool]) -> Optional[Any]:
    """Return the first node in pre-order satisfying ``predicate``, or None."""
    def step(current, state):
        return Halt(current) if predicate(current) else Continue(state)

    signal = fold(node, step, None)
    return signal.result if isinstance(signal, Halt) else None


def count_nodes(node: Any) -> int:
    """Number of nodes in the tree rooted at ``node``."""
    return fold(node, lambda current, total: Continue(total + 1), 0).state
