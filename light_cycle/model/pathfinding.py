"""Shortest-path search used by assisted path drawing."""

import heapq
from typing import Dict, List, Optional

from .grid import Cell, GridMap


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def find_path(grid: GridMap, start: Cell, goal: Cell) -> Optional[List[Cell]]:
    """
    A* search over the 4-connected grid from start to goal.

    Obstacles are impassable and every step costs 1, so the Manhattan
    distance is admissible and the result is a shortest route. The heap is
    ordered by (f, insertion counter): equal-cost candidates are expanded in
    the order they were discovered, which follows the grid's fixed neighbor
    order, so identical obstacle sets always produce the identical route.

    Returns the route including both endpoints, or None if goal is
    unreachable or either endpoint is not walkable.
    """
    if not grid.is_walkable(*start) or not grid.is_walkable(*goal):
        return None
    if start == goal:
        return [start]

    counter = 0
    open_set = [(manhattan(start, goal), counter, start)]
    came_from: Dict[Cell, Cell] = {}
    g_score: Dict[Cell, int] = {start: 0}
    closed = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)

        if current == goal:
            # Reconstruct path
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path

        if current in closed:
            continue
        closed.add(current)

        for neighbor in grid.get_neighbors(*current):
            if neighbor in closed:
                continue
            tentative_g = g_score[current] + 1
            if tentative_g < g_score.get(neighbor, float('inf')):
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                counter += 1
                heapq.heappush(
                    open_set,
                    (tentative_g + manhattan(neighbor, goal), counter, neighbor))

    return None
