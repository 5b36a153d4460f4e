"""
Graph runner — thin layer over nodnod.

    from storefront import _graph as G

    @G.node
    class FetchStage:
        @classmethod
        async def __compose__(cls, job: LineJob) -> FetchStage: ...

    pipeline = G.graph(LineResult)       # compile once
    result = await pipeline(job)         # run per input
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, cast

from nodnod import EventLoopAgent, Node, Scope, Value
from nodnod import scalar_node as node


@dataclass(slots=True, frozen=True)
class Compiled[T]:
    """
    Pre-built agent for one target node.

    Inputs are injected under their runtime type, so each node parameter
    must name the exact injected class.
    """

    _target: type[T]
    _agent: EventLoopAgent

    async def __call__(self, *inputs: object) -> T:
        async with Scope(detail=self._target.__name__) as scope:
            for value in inputs:
                scope.push(Value(type(value), value))

            run = cast(
                Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
                getattr(self._agent, "run"),
            )
            await run(scope, {})

            found = scope.get(self._target)
            if found is None:
                raise KeyError(f"{self._target.__name__} was not composed")
            return cast(T, found.value)


def graph[T](target: type[T]) -> Compiled[T]:
    """Compile the graph ending at target. Dependencies are discovered from it."""
    nodes: set[type[Node[Any, Any]]] = {cast(type[Node[Any, Any]], target)}
    return Compiled(_target=target, _agent=EventLoopAgent.build(nodes))


__all__ = ("node", "Compiled", "graph")
