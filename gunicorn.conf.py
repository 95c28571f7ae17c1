"""
Gunicorn configuration for production deployment.

Run with: gunicorn formation_api.main:app -c gunicorn.conf.py
"""
import os

from formation_api.config import settings

# Server socket
bind = os.getenv("BIND", f"{settings.HOST}:{settings.PORT}")
backlog = 2048

# Worker processes
# bcrypt hashing is CPU bound, so one worker per core is the useful maximum
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 200

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts
timeout = 30
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = settings.APP_NAME.lower().replace(" ", "_")

# Server mechanics
daemon = False
pidfile = None

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = settings.LOG_LEVEL.lower()


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT})")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Gunicorn server is ready. Spawning workers")


def worker_abort(worker):
    """Called when a worker is aborted (usually a request timeout)."""
    worker.log.info("Worker received SIGABRT signal")
