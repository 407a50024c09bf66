"""Gunicorn config for the CLC Captación API."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# One worker: the snapshot store is a single JSON file and every write
# replaces it whole, so concurrent workers would race on last-write-wins.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))

# Remote pushes wait up to CAPTACION_REMOTE_TIMEOUT (20s) per request
timeout = 60
graceful_timeout = 30
keepalive = 65

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("CAPTACION_LOG_LEVEL", "info").lower()
