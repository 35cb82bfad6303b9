#!/usr/bin/env python3
"""
Error taxonomy and structured error handling for the maze runner
Core invariant violations abort loudly, user input errors surface to the caller
"""

import datetime
import functools
import logging
import traceback
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException


class MazeError(Exception):
    """Base class for every error raised by the maze runner"""


class InvalidDimension(MazeError, ValueError):
    """Raised when a maze is requested with a non-positive half-dimension"""

    def __init__(self, name: str, value: Any):
        self.name = name
        self.value = value
        super().__init__(f"{name} must be a positive integer, got {value!r}")


class InvariantViolation(MazeError, AssertionError):
    """A core invariant was broken; this is always a bug, never user input"""


class CellTransitionError(InvariantViolation):
    """Raised when flip is applied to a cell with no legal transition"""

    def __init__(self, cell: Any):
        self.cell = cell
        super().__init__(f"{cell.name.title()} cannot be flipped")


class SessionNotFound(MazeError, KeyError):
    """Raised when a web session id is unknown or expired"""

    def __init__(self, maze_id: str):
        self.maze_id = maze_id
        super().__init__(maze_id)

    def __str__(self):
        return f"Unknown maze session {self.maze_id!r}"


def handle_errors(logger=None):
    """Decorator that logs unexpected exceptions with context, then re-raises"""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except MazeError:
                raise
            except Exception as e:
                context = {
                    'function': func.__name__,
                    'module': func.__module__,
                    'args_count': len(args),
                    'kwargs_keys': list(kwargs.keys()),
                    'timestamp': datetime.datetime.now().isoformat()
                }
                if logger is not None and hasattr(logger, 'log_error'):
                    logger.log_error(e, context)
                else:
                    logging.getLogger(func.__module__).error(
                        f"Error in {func.__name__}: {e}", exc_info=True
                    )
                raise
        return wrapper
    return decorator


class FlaskErrorHandler:
    """Maps the maze error taxonomy onto JSON HTTP responses"""

    def __init__(self, app: Flask, logger):
        self.app = app
        self.logger = logger
        self.setup_handlers()

    def _request_context(self) -> Dict[str, Optional[str]]:
        return {
            'request_method': request.method,
            'request_url': request.url,
            'user_agent': request.headers.get('User-Agent')
        }

    def setup_handlers(self):
        """Register the error handlers on the app"""

        @self.app.errorhandler(InvalidDimension)
        def invalid_dimension(error):
            self.logger.log_game_event('invalid_dimension', {
                'name': error.name,
                'value': repr(error.value)
            })
            return jsonify({'error': 'Invalid dimension', 'message': str(error)}), 400

        @self.app.errorhandler(SessionNotFound)
        def session_not_found(error):
            return jsonify({'error': 'Not found', 'message': str(error)}), 404

        @self.app.errorhandler(400)
        def bad_request(error):
            self.logger.log_error(error, self._request_context())
            return jsonify({'error': 'Bad request', 'message': getattr(error, 'description', str(error))}), 400

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({'error': 'Not found', 'message': getattr(error, 'description', str(error))}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({'error': 'Method not allowed', 'message': getattr(error, 'description', str(error))}), 405

        @self.app.errorhandler(Exception)
        def handle_exception(error):
            """Catch-all handler; core invariant violations end up here"""
            if isinstance(error, HTTPException):
                return jsonify({'error': error.name, 'message': error.description}), error.code

            context = self._request_context()
            context['traceback'] = traceback.format_exc()
            self.logger.log_error(error, context)

            if self.app.debug:
                return jsonify({
                    'error': 'Internal error',
                    'message': str(error),
                    'traceback': context['traceback']
                }), 500
            return jsonify({'error': 'Internal server error', 'message': 'Something went wrong'}), 500
