#!/usr/bin/env python3
"""
Maze game server with in-memory session storage
Each session owns one maze; clients move the cursor and reset over JSON
"""

import threading
import time
import uuid
from typing import Dict, Optional

from flask import Flask, abort, jsonify, request

from config import load_config
from error_handling import FlaskErrorHandler, SessionNotFound
from maze_generator import MODES, MazeGenerator
from maze_renderer import draw_frame, encode_png
from maze_state import Direction, MazeState
from monitoring import maze_logger, setup_monitoring


class GameSession:
    """One maze plus its timer, as seen by a web client"""

    def __init__(self, maze_id: str, maze: MazeState):
        self.maze_id = maze_id
        self.maze = maze
        self.created_at = time.time()
        self.last_seen = self.created_at
        self.started_at = time.monotonic()
        self.completion_time: Optional[float] = None
        self.moves = 0

    @property
    def elapsed(self) -> float:
        if self.completion_time is not None:
            return self.completion_time
        return time.monotonic() - self.started_at

    def touch(self):
        self.last_seen = time.time()

    def move(self, direction: Direction) -> bool:
        self.touch()
        moved = self.maze.move(direction)
        if moved:
            self.moves += 1
        if self.maze.is_done() and self.completion_time is None:
            self.completion_time = time.monotonic() - self.started_at
            maze_logger.log_game_event('maze_completed', {
                'maze_id': self.maze_id,
                'seconds': round(self.completion_time, 2),
                'moves': self.moves
            })
        return moved

    def reset(self):
        self.touch()
        self.maze.reset()
        self.started_at = time.monotonic()
        self.completion_time = None
        self.moves = 0

    def to_dict(self, include_image=False, image_size=(800, 600)) -> Dict:
        data = {
            'maze_id': self.maze_id,
            'maze': self.maze.to_dict(),
            'elapsed': round(self.elapsed, 2),
            'completion_time': round(self.completion_time, 2) if self.completion_time is not None else None,
            'moves': self.moves
        }
        if include_image:
            width, height = image_size
            frame = draw_frame(self.maze, width, height, self.elapsed,
                               completed=self.completion_time is not None)
            data['image'] = encode_png(frame)
        return data


class GameStore:
    """Sessions keyed by id; callers hold `lock` while touching a session"""

    def __init__(self, ttl_seconds: int = 1800):
        self.ttl_seconds = ttl_seconds
        self.sessions: Dict[str, GameSession] = {}
        self.lock = threading.Lock()

    def create(self, maze: MazeState) -> GameSession:
        self.expire()
        maze_id = f"maze_{uuid.uuid4().hex[:12]}"
        session = GameSession(maze_id, maze)
        self.sessions[maze_id] = session
        return session

    def get(self, maze_id: str) -> GameSession:
        session = self.sessions.get(maze_id)
        if session is None:
            raise SessionNotFound(maze_id)
        return session

    def expire(self):
        """Drop sessions idle for longer than the ttl"""
        current_time = time.time()
        old_sessions = [sid for sid, session in self.sessions.items()
                        if current_time - session.last_seen > self.ttl_seconds]
        for old_id in old_sessions:
            del self.sessions[old_id]
        return len(old_sessions)


def create_app(config: Optional[dict] = None) -> Flask:
    settings = load_config(config)

    app = Flask(__name__)
    app.config['MAZE'] = settings
    store = GameStore(settings['session_ttl_seconds'])
    app.extensions['maze_store'] = store

    FlaskErrorHandler(app, maze_logger)
    setup_monitoring(app)

    def json_body() -> dict:
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            abort(400, description="Request body must be a JSON object")
        return data

    def wants_image() -> bool:
        return request.args.get('image', '').lower() in ('1', 'true', 'yes')

    @app.route('/api/health', methods=['GET'])
    def health():
        with store.lock:
            active = len(store.sessions)
        return jsonify({'status': 'healthy', 'active_sessions': active})

    @app.route('/api/maze', methods=['POST'])
    def create_maze():
        data = json_body()
        width = data.get('width', settings['default_width'])
        height = data.get('height')
        if height is None:
            height = width * 3 // 5 if isinstance(width, int) else width

        limit = settings['max_dimension']
        for name, value in (('width', width), ('height', height)):
            if isinstance(value, int) and not isinstance(value, bool) and value > limit:
                abort(400, description=f"{name} must be at most {limit}, got {value}")

        mode = data.get('mode', settings['generator_mode'])
        if mode not in MODES:
            abort(400, description=f"mode must be one of {list(MODES)}")
        seed = data.get('seed', settings['seed'])
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            abort(400, description="seed must be an integer")

        maze = MazeGenerator(mode=mode, seed=seed).generate(width, height)
        with store.lock:
            session = store.create(maze)
            body = session.to_dict(include_image=wants_image())

        maze_logger.log_game_event('session_created', {
            'maze_id': session.maze_id,
            'mode': mode,
            'half_width': maze.half_width,
            'half_height': maze.half_height
        })
        return jsonify(body), 201

    @app.route('/api/maze/<maze_id>', methods=['GET'])
    def get_maze(maze_id):
        with store.lock:
            session = store.get(maze_id)
            session.touch()
            return jsonify(session.to_dict(include_image=wants_image()))

    @app.route('/api/maze/<maze_id>/move', methods=['POST'])
    def move(maze_id):
        data = json_body()
        try:
            direction = Direction.parse(data.get('direction', ''))
        except ValueError as e:
            abort(400, description=str(e))

        with store.lock:
            session = store.get(maze_id)
            moved = session.move(direction)
            body = session.to_dict(include_image=wants_image())
        body['moved'] = moved
        return jsonify(body)

    @app.route('/api/maze/<maze_id>/reset', methods=['POST'])
    def reset(maze_id):
        with store.lock:
            session = store.get(maze_id)
            session.reset()
            body = session.to_dict(include_image=wants_image())
        maze_logger.log_game_event('session_reset', {'maze_id': maze_id})
        return jsonify(body)

    return app


if __name__ == '__main__':
    settings = load_config()
    maze_logger.set_level(settings['log_level'])
    maze_logger.enable_file_logging(settings['log_dir'])

    app = create_app()
    maze_logger.logger.info(f"Starting maze server on http://{settings['host']}:{settings['port']}")
    app.run(host=settings['host'], port=settings['port'], debug=False)
