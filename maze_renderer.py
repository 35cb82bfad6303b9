#!/usr/bin/env python3
"""
Rendering helpers for the maze runner
- OpenCV/numpy raster of the grid with a timer banner (desktop window, web images)
- matplotlib snapshot renderer
"""

import base64
from typing import Dict, Optional, Tuple

import cv2
import matplotlib.pyplot as plt
import numpy as np

from config import CONFIG
from maze_state import Cell, MazeState

Color = Tuple[int, int, int]
Rectangle = Tuple[float, float, float, float]

CELL_COLOR_KEYS = {
    Cell.WALL: "wall",
    Cell.EMPTY: "empty",
    Cell.VISITED: "visited",
    Cell.CURSOR: "cursor",
    Cell.GOAL: "goal",
}


def color_at_cell(state: MazeState, row: int, col: int, colors: Optional[Dict[str, Color]] = None) -> Color:
    """BGR color used to paint a cell"""
    colors = colors or CONFIG["colors"]
    return colors[CELL_COLOR_KEYS[state.cell_at(row, col)]]


def rectangle_at_cell(state: MazeState, area_width: float, area_height: float,
                      row: int, col: int) -> Rectangle:
    """Corners (left, top, right, bottom) of a cell inside a drawing area.

    Cells are separated by a 2px border, or 1px once cells get smaller than
    4px in either direction.
    """
    threshold = CONFIG["thin_border_threshold"]
    if area_width / state.width < threshold or area_height / state.height < threshold:
        border = 1.0
    else:
        border = 2.0

    box_width = (area_width - (state.width + 1) * border) / state.width
    box_height = (area_height - (state.height + 1) * border) / state.height

    left = (border + box_width) * col + border
    right = (border + box_width) * (col + 1)
    top = (border + box_height) * row + border
    bottom = (border + box_height) * (row + 1)
    return left, top, right, bottom


def draw_maze(state: MazeState, width: int, height: int,
              colors: Optional[Dict[str, Color]] = None) -> np.ndarray:
    """Paint every cell of the maze into a width x height BGR image"""
    colors = colors or CONFIG["colors"]
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:] = colors["background"]

    for row in range(state.height):
        for col in range(state.width):
            left, top, right, bottom = rectangle_at_cell(state, width, height, row, col)
            img[int(round(top)):int(round(bottom)), int(round(left)):int(round(right))] = \
                color_at_cell(state, row, col, colors)
    return img


def draw_frame(state: MazeState, width: int, height: int, elapsed: float,
               completed: bool = False, colors: Optional[Dict[str, Color]] = None) -> np.ndarray:
    """Timer banner on top, maze below"""
    colors = colors or CONFIG["colors"]
    banner_height = int(height * CONFIG["banner_ratio"])

    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    canvas[:] = colors["background"]
    canvas[banner_height:, :] = draw_maze(state, width, height - banner_height, colors)

    text = f"{elapsed:.1f}s"
    text_color = colors["timer_done"] if completed else colors["timer_running"]
    font = cv2.FONT_HERSHEY_SIMPLEX
    scale = max(0.5, banner_height / 60.0)
    thickness = max(1, int(scale * 2))
    (text_width, text_height), _ = cv2.getTextSize(text, font, scale, thickness)
    origin = ((width - text_width) // 2, (banner_height + text_height) // 2)
    cv2.putText(canvas, text, origin, font, scale, text_color, thickness, cv2.LINE_AA)
    return canvas


def encode_png(img: np.ndarray) -> str:
    """PNG data URL for an image"""
    ok, buffer = cv2.imencode('.png', img)
    if not ok:
        raise ValueError("PNG encoding failed")
    return f"data:image/png;base64,{base64.b64encode(buffer).decode()}"


class MazeRenderer:
    """Renders a maze state to a matplotlib axes"""

    def __init__(self, state: MazeState, colors: Optional[Dict[str, Color]] = None):
        self.state = state
        self.colors = colors or CONFIG["colors"]

    def to_rgb(self) -> np.ndarray:
        palette = np.zeros((len(Cell), 3), dtype=np.uint8)
        for cell, key in CELL_COLOR_KEYS.items():
            blue, green, red = self.colors[key]
            palette[cell] = (red, green, blue)
        return palette[self.state.grid]

    def render(self, ax):
        """Render complete maze to axes"""
        ax.clear()
        ax.imshow(self.to_rgb(), interpolation='nearest')
        ax.set_xticks([])
        ax.set_yticks([])
        status = "solved" if self.state.is_done() else "in progress"
        ax.set_title(f"{self.state.half_width}x{self.state.half_height} maze ({status})\n"
                     f"Start: (0, 0) | Goal: {self.state.goal}")

    def save(self, path, dpi=100):
        fig, ax = plt.subplots(figsize=(10, 10 * self.state.height / self.state.width))
        try:
            self.render(ax)
            fig.savefig(path, dpi=dpi, bbox_inches='tight')
        finally:
            plt.close(fig)
