"""
Gunicorn configuration for the budget tracking API

    gunicorn -c deployment/gunicorn_config.py "app:create_app('production')"
"""
import multiprocessing
import os

APP_HOME = os.environ.get('BUDGET_TRACKING_HOME', '/opt/budget-tracking')

# Server socket
bind = os.environ.get('GUNICORN_BIND', '127.0.0.1:8000')
backlog = 2048

# Workers: synchronous request-per-worker model
workers = int(os.environ.get('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'
max_requests = 1000
max_requests_jitter = 50
timeout = 30
keepalive = 5

# Logging
accesslog = os.path.join(APP_HOME, 'logs', 'gunicorn_access.log')
errorlog = os.path.join(APP_HOME, 'logs', 'gunicorn_error.log')
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = 'budget-tracking'
pidfile = os.path.join(APP_HOME, 'gunicorn.pid')
daemon = False
umask = 0o007

# Request limits (JSON API, small bodies)
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def when_ready(server):
    server.log.info("Budget tracking API ready")


def worker_abort(worker):
    """Called when a worker times out; usually a slow aggregate query"""
    worker.log.warning("Worker %s aborted", worker.pid)
