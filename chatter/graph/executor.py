"""
Graph executor - walks typed nodes along guarded edges

A graph is a mapping from node name to node function plus an ordered list
of (source, guard, target) edges. The executor starts at START, runs one
node at a time, and at each step takes the first edge leaving the current
node whose guard holds (an edge without a guard always holds). Reaching
FINISH ends the run with the current value.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from chatter.config.settings import settings
from chatter.graph.session import Session
from chatter.utils.errors import RoutingError

START = "__start__"
FINISH = "__finish__"

NodeFunc = Callable[[Any, Session], Awaitable[Any]]
Guard = Callable[[Any, Session], bool]
Transform = Callable[[Any], Any]


@dataclass
class Node:
    """A named processing step: (value, session) -> value"""
    name: str
    func: NodeFunc


@dataclass
class Edge:
    """Directed, optionally guarded transition between two nodes"""
    source: str
    target: str
    condition: Optional[Guard] = None
    transform: Optional[Transform] = None
    label: Optional[str] = None

    def matches(self, value: Any, session: Session) -> bool:
        return self.condition is None or bool(self.condition(value, session))

    def __str__(self) -> str:
        guard = f" [{self.label}]" if self.label else ""
        return f"{self.source} -> {self.target}{guard}"


@dataclass
class RunTrace:
    """Nodes visited by one run, in order"""
    run_id: str
    visited: List[str] = field(default_factory=list)


class Graph:
    """
    Graph definition. Nodes and edges are declared up front, then compiled
    into a GraphExecutor.
    """

    def __init__(self, name: str):
        self.name = name
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []

    def add_node(self, name: str, func: NodeFunc) -> "Graph":
        if name in (START, FINISH):
            raise ValueError(f"'{name}' is reserved")
        if name in self.nodes:
            raise ValueError(f"Node '{name}' already exists in graph '{self.name}'")
        self.nodes[name] = Node(name=name, func=func)
        return self

    def add_edge(
        self,
        source: str,
        target: str,
        condition: Optional[Guard] = None,
        transform: Optional[Transform] = None,
        label: Optional[str] = None,
    ) -> "Graph":
        self.edges.append(
            Edge(source=source, target=target, condition=condition, transform=transform, label=label)
        )
        return self

    def set_entry_point(self, name: str) -> "Graph":
        return self.add_edge(START, name)

    def set_finish_point(self, name: str) -> "Graph":
        return self.add_edge(name, FINISH)

    def edges_from(self, source: str) -> List[Edge]:
        return [edge for edge in self.edges if edge.source == source]

    def compile(self, max_steps: Optional[int] = None) -> "GraphExecutor":
        """Check that every edge endpoint exists and build the executor."""
        known = set(self.nodes) | {START, FINISH}
        for edge in self.edges:
            if edge.source not in known or edge.target not in known:
                raise RoutingError(f"Edge {edge} references an unknown node", node=edge.source)
            if edge.source == FINISH:
                raise RoutingError("Edges cannot leave the finish node", node=FINISH)
        if not self.edges_from(START):
            raise RoutingError(f"Graph '{self.name}' has no entry point", node=START)
        return GraphExecutor(self, max_steps=max_steps or settings.graph_max_steps)


class GraphExecutor:
    """
    Runs a compiled graph. Strictly sequential within a run: a node finishes
    (including its model calls) before the next one starts.
    """

    def __init__(self, graph: Graph, max_steps: int):
        self.graph = graph
        self.max_steps = max_steps

    def _next_edge(self, current: str, value: Any, session: Session) -> Edge:
        edges = self.graph.edges_from(current)
        for edge in edges:
            if edge.matches(value, session):
                return edge
        raise RoutingError(
            f"No satisfiable edge leaving '{current}' (checked {len(edges)} edges)",
            node=current,
        )

    async def _run_node(self, node: Node, value: Any, session: Session, run_id: str) -> Any:
        start = time.time()
        logger.info(f"[TRACE] step_start: {node.name} | run_id={run_id}")
        try:
            result = await node.func(value, session)
        except Exception as e:
            logger.error(f"[TRACE] step_error: {node.name} | run_id={run_id} | error={e}")
            raise
        duration = time.time() - start
        logger.info(
            f"[TRACE] step_end: {node.name} | run_id={run_id} | duration_ms={int(duration * 1000)}"
        )
        return result

    async def run(self, value: Any, session: Session, trace: Optional[RunTrace] = None) -> Any:
        """
        Run from START to FINISH.

        Returns:
            The value produced when FINISH is reached

        Raises:
            RoutingError: no satisfiable edge, or the step budget is exceeded
            AgentError: any terminal error raised by a node, unchanged
        """
        trace = trace or RunTrace(run_id=uuid.uuid4().hex[:12])
        current = START
        steps = 0

        while True:
            edge = self._next_edge(current, value, session)
            if edge.transform is not None:
                value = edge.transform(value)
            logger.debug(f"[GRAPH] {self.graph.name}: {edge}")

            if edge.target == FINISH:
                logger.info(
                    f"[GRAPH] {self.graph.name} finished | run_id={trace.run_id} | steps={steps} | "
                    f"path={' -> '.join(trace.visited)}"
                )
                return value

            steps += 1
            if steps > self.max_steps:
                raise RoutingError(
                    f"Step budget of {self.max_steps} exceeded in graph '{self.graph.name}'",
                    node=edge.target,
                )

            node = self.graph.nodes[edge.target]
            trace.visited.append(node.name)
            value = await self._run_node(node, value, session, trace.run_id)
            current = node.name
