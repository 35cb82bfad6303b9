#!/usr/bin/env python3
"""
Logging and performance monitoring for the maze runner
"""

import json
import logging
import logging.handlers
import os
import threading
import time
from datetime import datetime, timezone
from functools import wraps

from flask import g, jsonify, request


class MazeLogger:
    def __init__(self, name='maze_runner', level='INFO'):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
        self.logger.propagate = False
        self.log_dir = None

        self.formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(self.formatter)
            self.logger.addHandler(console_handler)

    def set_level(self, level):
        self.logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    def enable_file_logging(self, log_dir='logs'):
        """Add rotating file handlers for the main log and the error log"""
        if self.log_dir == log_dir:
            return
        os.makedirs(log_dir, exist_ok=True)
        self.log_dir = log_dir

        main_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'maze.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(self.formatter)

        error_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'error.log'),
            maxBytes=5*1024*1024,   # 5MB
            backupCount=5
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(self.formatter)

        self.logger.addHandler(main_handler)
        self.logger.addHandler(error_handler)

    def log_game_event(self, event_type, data=None):
        """Log a game event (generation, reset, completion, ...)"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
            'data': data or {}
        }
        self.logger.info(f"GAME: {json.dumps(log_data, default=str)}")

    def log_error(self, error, context=None):
        """Log errors with context"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'error': str(error),
            'type': type(error).__name__,
            'context': context or {}
        }
        self.logger.error(f"ERROR: {json.dumps(log_data, default=str)}")

    def log_performance(self, operation, duration, details=None):
        """Log performance metrics"""
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'operation': operation,
            'duration_ms': round(duration * 1000, 2),
            'details': details or {}
        }
        self.logger.info(f"PERFORMANCE: {json.dumps(log_data, default=str)}")


class PerformanceMonitor:
    def __init__(self, logger, slow_threshold=1.0):
        self.logger = logger
        self.slow_threshold = slow_threshold
        self.metrics = {}
        self.lock = threading.Lock()

    def time_operation(self, operation_name):
        """Decorator to time operations"""
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.perf_counter()
                success = True
                error = None
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    success = False
                    error = str(e)
                    raise
                finally:
                    duration = time.perf_counter() - start_time
                    self.record_metric(operation_name, duration, success, error)
            return wrapper
        return decorator

    def record_metric(self, operation, duration, success=True, error=None):
        """Record performance metric"""
        with self.lock:
            if operation not in self.metrics:
                self.metrics[operation] = {
                    'count': 0,
                    'total_duration': 0,
                    'success_count': 0,
                    'error_count': 0,
                    'min_duration': float('inf'),
                    'max_duration': 0,
                    'errors': []
                }

            metric = self.metrics[operation]
            metric['count'] += 1
            metric['total_duration'] += duration
            metric['min_duration'] = min(metric['min_duration'], duration)
            metric['max_duration'] = max(metric['max_duration'], duration)

            if success:
                metric['success_count'] += 1
            else:
                metric['error_count'] += 1
                if error and len(metric['errors']) < 10:
                    metric['errors'].append(error)

            average = metric['total_duration'] / metric['count']

        if duration > self.slow_threshold:
            self.logger.log_performance(operation, duration, {
                'success': success,
                'avg_duration': average
            })

    def get_metrics(self):
        """Get all performance metrics"""
        with self.lock:
            result = {}
            for operation, metric in self.metrics.items():
                if metric['count'] > 0:
                    result[operation] = {
                        'count': metric['count'],
                        'avg_duration_ms': round(metric['total_duration'] / metric['count'] * 1000, 2),
                        'min_duration_ms': round(metric['min_duration'] * 1000, 2),
                        'max_duration_ms': round(metric['max_duration'] * 1000, 2),
                        'success_rate': round(metric['success_count'] / metric['count'] * 100, 2),
                        'error_count': metric['error_count'],
                        'recent_errors': metric['errors'][-5:]
                    }
            return result

    def reset(self):
        with self.lock:
            self.metrics.clear()


# Global instances
maze_logger = MazeLogger()
performance_monitor = PerformanceMonitor(maze_logger)


def setup_monitoring(app):
    """Setup request timing and the metrics endpoint for a Flask app"""

    @app.before_request
    def before_request():
        g.start_time = time.perf_counter()

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            response_time = time.perf_counter() - g.start_time
            performance_monitor.record_metric(f"http {request.method} {request.endpoint}", response_time,
                                              success=response.status_code < 500)
        return response

    @app.route('/admin/metrics')
    def get_metrics():
        """Performance metrics endpoint"""
        return jsonify(performance_monitor.get_metrics())

    return performance_monitor


# Monitoring decorators
def monitor_maze_generation(func):
    """Monitor maze generation performance"""
    return performance_monitor.time_operation('maze_generation')(func)
