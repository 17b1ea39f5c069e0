"""NetworkX inheritance graph built from resolved registry edges."""

from __future__ import annotations

from collections import deque
from typing import Iterable

import networkx as nx
from loguru import logger

from .models import ClassId
from .registry import Registry


class InheritanceGraph:
    """Parent -> child edges between classes of one registry.

    Successors of a node are its direct subclasses, predecessors its direct
    parents. The graph is never mutated after `build`.
    """

    def __init__(self, graph: nx.DiGraph) -> None:
        self._graph = graph

    @classmethod
    def build(cls, registry: Registry) -> "InheritanceGraph":
        graph = nx.DiGraph()
        graph.add_nodes_from(registry)
        unresolved = 0

        for child_id, metadata in registry.classes.items():
            for base in metadata.bases:
                parent_id = registry.resolve_class(child_id.module_path, base)
                if parent_id is None:
                    unresolved += 1
                    continue
                graph.add_edge(parent_id, child_id)

        logger.debug(
            f"Inheritance graph: {graph.number_of_nodes()} classes, "
            f"{graph.number_of_edges()} edges, {unresolved} unresolved bases"
        )
        return cls(graph)

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def has_subclasses(self, root: ClassId) -> bool:
        return root in self._graph and self._graph.out_degree(root) > 0

    def find_direct_subclasses(self, root: ClassId) -> list[ClassId]:
        if root not in self._graph:
            return []
        return list(self._graph.successors(root))

    def find_direct_parent_classes(self, root: ClassId) -> list[ClassId]:
        if root not in self._graph:
            return []
        return list(self._graph.predecessors(root))

    def find_all_subclasses(self, root: ClassId) -> list[ClassId]:
        return self._breadth_first(root, self.find_direct_subclasses)

    def find_all_parent_classes(self, root: ClassId) -> list[ClassId]:
        return self._breadth_first(root, self.find_direct_parent_classes)

    @staticmethod
    def _breadth_first(root: ClassId, neighbours) -> list[ClassId]:
        result: list[ClassId] = []
        visited = {root}
        queue: deque[ClassId] = deque(neighbours(root))

        while queue:
            class_id = queue.popleft()
            if class_id in visited:
                continue
            visited.add(class_id)
            result.append(class_id)
            queue.extend(_unvisited(neighbours(class_id), visited))

        return result


def _unvisited(nodes: Iterable[ClassId], visited: set[ClassId]) -> list[ClassId]:
    return [node for node in nodes if node not in visited]
