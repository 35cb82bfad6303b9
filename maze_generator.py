#!/usr/bin/env python3
"""
Maze Generator using randomized frontier growth
- Grows a random spanning tree over a half_height x half_width vertex grid
- "single" mode grows one tree from the start vertex
- "two_color" mode grows one tree from the start and one from the goal and
  lets them merge across exactly one seam, so the solution is never a short
  direct corridor
- The tree is rasterized into a (2*half_height-1) x (2*half_width-1) cell grid
"""

import random
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from error_handling import InvalidDimension
from maze_state import Cell, MazeState
from monitoring import maze_logger, monitor_maze_generation
from random_set import RandomSet

Vertex = Tuple[int, int]
Edge = Tuple[Vertex, Vertex]

MODES = ("single", "two_color")

COLOR_START = "A"
COLOR_GOAL = "B"


def _check_dimension(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise InvalidDimension(name, value)
    return int(value)


class MazeGenerator:
    """Random spanning-tree maze generator"""

    def __init__(self, mode: str = "two_color", seed: Optional[int] = None):
        if mode not in MODES:
            raise ValueError(f"Unknown generator mode {mode!r}, expected one of {MODES}")
        self.mode = mode
        self.seed = seed
        self.rng = random.Random(seed)
        self.last_edges: List[Edge] = []
        self.last_seam: Optional[Edge] = None

    @staticmethod
    def neighbors(vertex: Vertex, half_width: int, half_height: int) -> Iterator[Vertex]:
        """In-bounds vertices one step away from vertex"""
        row, col = vertex
        if row > 0:
            yield (row - 1, col)
        if row < half_height - 1:
            yield (row + 1, col)
        if col > 0:
            yield (row, col - 1)
        if col < half_width - 1:
            yield (row, col + 1)

    @monitor_maze_generation
    def generate(self, half_width: int, half_height: int,
                 rng: Optional[random.Random] = None) -> MazeState:
        """Generate a maze and return its initial state"""
        half_width = _check_dimension("half_width", half_width)
        half_height = _check_dimension("half_height", half_height)
        if rng is None:
            rng = self.rng

        if self.mode == "two_color":
            edges, seam = self._grow_two_color(half_width, half_height, rng)
        else:
            edges, seam = self._grow_single(half_width, half_height, rng), None
        self.last_edges = edges
        self.last_seam = seam

        state = MazeState(self.rasterize(edges, half_width, half_height),
                          half_width, half_height, generator=self)
        state.validate()

        maze_logger.log_game_event('maze_generated', {
            'mode': self.mode,
            'half_width': half_width,
            'half_height': half_height,
            'edges': len(edges),
            'seam': seam
        })
        return state

    def _grow_single(self, half_width: int, half_height: int, rng: random.Random) -> List[Edge]:
        start = (0, 0)
        seen = {start}
        frontier = RandomSet((start, target) for target in self.neighbors(start, half_width, half_height))
        edges = []

        while frontier:
            edge = frontier.pop_random(rng)
            source, target = edge
            assert source in seen
            if target in seen:
                continue

            seen.add(target)
            edges.append(edge)
            for neighbor in self.neighbors(target, half_width, half_height):
                if neighbor not in seen:
                    frontier.add((target, neighbor))

        return edges

    def _grow_two_color(self, half_width: int, half_height: int,
                        rng: random.Random) -> Tuple[List[Edge], Optional[Edge]]:
        start = (0, 0)
        goal = (half_height - 1, half_width - 1)
        if start == goal:
            return [], None

        colors: Dict[Vertex, str] = {start: COLOR_START, goal: COLOR_GOAL}
        colors_crossed = False
        seam = None
        frontier = RandomSet()
        edges = []

        def offer(vertex: Vertex) -> None:
            # Edges to unseen vertices, plus seam candidates until the trees merge
            for neighbor in self.neighbors(vertex, half_width, half_height):
                color = colors.get(neighbor)
                if color is None or (not colors_crossed and color != colors[vertex]):
                    frontier.add((vertex, neighbor))

        offer(start)
        offer(goal)

        while frontier:
            edge = frontier.pop_random(rng)
            source, target = edge
            target_color = colors.get(target)

            if target_color is None:
                colors[target] = colors[source]
                edges.append(edge)
                offer(target)
            elif not colors_crossed and target_color != colors[source]:
                colors_crossed = True
                seam = edge
                edges.append(edge)

        return edges, seam

    @staticmethod
    def rasterize(edges: List[Edge], half_width: int, half_height: int) -> np.ndarray:
        """Turn a set of realized edges into a cell grid"""
        height = 2 * half_height - 1
        width = 2 * half_width - 1
        grid = np.full((height, width), Cell.WALL, dtype=np.uint8)

        grid[0::2, 0::2] = Cell.EMPTY
        for (start_row, start_col), (end_row, end_col) in edges:
            grid[start_row + end_row, start_col + end_col] = Cell.EMPTY

        grid[height - 1, width - 1] = Cell.GOAL
        grid[0, 0] = Cell.CURSOR
        return grid


def generate(half_width: int, half_height: int, mode: str = "two_color",
             seed: Optional[int] = None) -> MazeState:
    """Convenience wrapper around MazeGenerator(mode, seed).generate()"""
    return MazeGenerator(mode=mode, seed=seed).generate(half_width, half_height)
