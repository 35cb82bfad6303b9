#!/usr/bin/env python3
"""
Maze grid state: cell tags, cursor movement, visitation trail and completion

Wall cells never change after generation. Empty, Visited and Goal cells swap
with the cursor as it moves, and exactly one cell is tagged Cursor.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, Tuple

import numpy as np

from error_handling import CellTransitionError, InvariantViolation

Position = Tuple[int, int]


class Cell(IntEnum):
    WALL = 0
    EMPTY = 1
    VISITED = 2
    CURSOR = 3
    GOAL = 4

    def flip(self) -> "Cell":
        """Trail transition; only Empty, Visited and Goal have one"""
        if self is Cell.EMPTY or self is Cell.GOAL:
            return Cell.VISITED
        if self is Cell.VISITED:
            return Cell.EMPTY
        raise CellTransitionError(self)


class Direction(Enum):
    UP = (-1, 0)
    DOWN = (1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)

    @property
    def delta(self) -> Position:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "Direction":
        """Look a direction up by case-insensitive name"""
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction {name!r}") from None


class MazeState:
    """Grid plus cursor and goal positions for one generated maze"""

    def __init__(self, grid: np.ndarray, half_width: int, half_height: int, generator=None):
        self.grid = grid
        self.height, self.width = grid.shape
        self.half_width = half_width
        self.half_height = half_height
        self.cursor: Position = (0, 0)
        self.goal: Position = (self.height - 1, self.width - 1)
        self.generator = generator

    def cell_at(self, row: int, col: int) -> Cell:
        return Cell(int(self.grid[row, col]))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def is_done(self) -> bool:
        return self.cursor == self.goal

    def move(self, direction: Direction) -> bool:
        """Move the cursor one cell; returns False when the move is a no-op.

        The vacated cell takes the flipped tag of the cell being entered, so
        stepping forward leaves a Visited trail and stepping back onto the
        trail erases it.
        """
        if self.is_done():
            return False

        row, col = self.cursor
        dr, dc = direction.delta
        new_row, new_col = row + dr, col + dc
        if not self.in_bounds(new_row, new_col):
            return False

        target = self.cell_at(new_row, new_col)
        if target is Cell.WALL:
            return False

        self.grid[row, col] = target.flip()
        self.grid[new_row, new_col] = Cell.CURSOR
        self.cursor = (new_row, new_col)
        return True

    def reset(self) -> None:
        """Replace the whole state with a fresh maze of the same size"""
        if self.generator is None:
            raise InvariantViolation("MazeState has no generator to reset from")

        old_height, old_width = self.height, self.width
        fresh = self.generator.generate(self.half_width, self.half_height)
        if (fresh.height, fresh.width) != (old_height, old_width):
            raise InvariantViolation(
                f"reset changed maze size from {old_height}x{old_width} to {fresh.height}x{fresh.width}"
            )
        self.__dict__.update(fresh.__dict__)

    def validate(self) -> None:
        """Raise InvariantViolation unless exactly one Cursor sits at self.cursor"""
        cursors = np.argwhere(self.grid == Cell.CURSOR)
        if len(cursors) != 1:
            raise InvariantViolation(f"expected exactly one cursor cell, found {len(cursors)}")
        found = (int(cursors[0][0]), int(cursors[0][1]))
        if found != self.cursor:
            raise InvariantViolation(f"cursor recorded at {self.cursor} but grid has it at {found}")

    def counts(self) -> Dict[str, int]:
        """Number of cells per tag"""
        values, totals = np.unique(self.grid, return_counts=True)
        counts = {cell.name.lower(): 0 for cell in Cell}
        for value, total in zip(values, totals):
            counts[Cell(int(value)).name.lower()] = int(total)
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            'grid': self.grid.tolist(),
            'height': self.height,
            'width': self.width,
            'half_width': self.half_width,
            'half_height': self.half_height,
            'cursor': list(self.cursor),
            'goal': list(self.goal),
            'done': self.is_done()
        }

    def __str__(self):
        symbols = {
            Cell.WALL: '##',
            Cell.EMPTY: '  ',
            Cell.VISITED: ' .',
            Cell.CURSOR: ' @',
            Cell.GOAL: ' G',
        }
        return "\n".join(
            "".join(symbols[Cell(int(value))] for value in row) for row in self.grid
        )
