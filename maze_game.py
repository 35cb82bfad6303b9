#!/usr/bin/env python3
"""
Desktop maze game
- Arrow keys (or WASD) move the cursor, R generates a new maze of the same size
- P saves a snapshot PNG, Esc or Q quits
- The timer turns green and stops once the goal is reached

Usage: maze_game.py [width] [height]
"""

import sys
import time
from datetime import datetime
from typing import List, Optional

import cv2

from config import load_config
from error_handling import InvalidDimension, handle_errors
from maze_generator import MazeGenerator
from maze_renderer import MazeRenderer, draw_frame
from maze_state import Direction, MazeState
from monitoring import maze_logger

# waitKeyEx codes differ per HighGUI backend (GTK, Win32, Cocoa)
ARROW_KEYS = {
    65362: Direction.UP, 2490368: Direction.UP, 63232: Direction.UP,
    65364: Direction.DOWN, 2621440: Direction.DOWN, 63233: Direction.DOWN,
    65361: Direction.LEFT, 2424832: Direction.LEFT, 63234: Direction.LEFT,
    65363: Direction.RIGHT, 2555904: Direction.RIGHT, 63235: Direction.RIGHT,
}
LETTER_KEYS = {
    ord('w'): Direction.UP,
    ord('s'): Direction.DOWN,
    ord('a'): Direction.LEFT,
    ord('d'): Direction.RIGHT,
}
KEY_ESCAPE = 27


def parse_dimensions(argv: List[str], default_width: int = 10):
    """Half-dimensions from the command line; unparsable values use defaults"""
    def parse(index):
        try:
            return int(argv[index])
        except (IndexError, ValueError):
            return None

    width = parse(0)
    if width is None:
        width = default_width
    height = parse(1)
    if height is None:
        height = width * 3 // 5
    return width, height


class MazeApp:
    """Game session: one maze plus its clock"""

    def __init__(self, maze: MazeState, config: Optional[dict] = None):
        self.config = config or load_config()
        self.maze = maze
        self.time = 0.0
        self.completion_time: Optional[float] = None
        self.running = True

    @property
    def displayed_time(self) -> float:
        return self.completion_time if self.completion_time is not None else self.time

    def update(self, dt: float):
        self.time += dt

    def handle_key(self, key: int):
        """Apply one key press"""
        if key in ARROW_KEYS:
            self.maze.move(ARROW_KEYS[key])
        else:
            key &= 0xFF
            letter = ord(chr(key).lower())
            if letter in LETTER_KEYS:
                self.maze.move(LETTER_KEYS[letter])
            elif letter == ord('r'):
                self.reset()
            elif letter == ord('p'):
                self.save_snapshot()
            elif key == KEY_ESCAPE or letter == ord('q'):
                self.running = False

        if self.maze.is_done() and self.completion_time is None:
            self.completion_time = self.time
            maze_logger.log_game_event('maze_completed', {
                'half_width': self.maze.half_width,
                'half_height': self.maze.half_height,
                'seconds': round(self.completion_time, 2)
            })

    def reset(self):
        self.maze.reset()
        self.time = 0.0
        self.completion_time = None
        maze_logger.log_game_event('maze_reset', {
            'height': self.maze.height,
            'width': self.maze.width
        })

    def save_snapshot(self, path=None):
        path = path or f"maze_{datetime.now().strftime('%Y%m%d_%H%M%S')}.png"
        MazeRenderer(self.maze, self.config["colors"]).save(path)
        maze_logger.log_game_event('snapshot_saved', {'path': str(path)})
        return path

    def render(self, width: int, height: int):
        return draw_frame(self.maze, width, height, self.displayed_time,
                          completed=self.completion_time is not None,
                          colors=self.config["colors"])

    def _frame_size(self, title):
        try:
            _, _, width, height = cv2.getWindowImageRect(title)
        except cv2.error:
            width = height = 0
        if width <= 0 or height <= 0:
            width, height = self.config["window_size"]
        return width, height

    @handle_errors(maze_logger)
    def run(self):
        """OpenCV window loop"""
        title = self.config["window_title"]
        cv2.namedWindow(title, cv2.WINDOW_NORMAL)
        if self.config["fullscreen"]:
            cv2.setWindowProperty(title, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
        else:
            cv2.resizeWindow(title, *self.config["window_size"])

        last = time.perf_counter()
        try:
            while self.running:
                now = time.perf_counter()
                self.update(now - last)
                last = now

                cv2.imshow(title, self.render(*self._frame_size(title)))
                key = cv2.waitKeyEx(self.config["frame_delay_ms"])
                if key != -1:
                    self.handle_key(key)

                if cv2.getWindowProperty(title, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            cv2.destroyAllWindows()


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config = load_config()
    maze_logger.set_level(config["log_level"])
    maze_logger.enable_file_logging(config["log_dir"])

    width, height = parse_dimensions(argv, config["default_width"])
    generator = MazeGenerator(mode=config["generator_mode"], seed=config["seed"])
    try:
        maze = generator.generate(width, height)
    except InvalidDimension as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    MazeApp(maze, config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
