"""
Graph layer - Session state and the graph executor
"""

from chatter.graph.executor import FINISH, START, Edge, Graph, GraphExecutor, Node, RunTrace
from chatter.graph.session import Prompt, SavePoint, Session, UsageTracker

__all__ = [
    "FINISH",
    "START",
    "Edge",
    "Graph",
    "GraphExecutor",
    "Node",
    "RunTrace",
    "Prompt",
    "SavePoint",
    "Session",
    "UsageTracker",
]
