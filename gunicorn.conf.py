"""Gunicorn configuration for the directory gateway.

Workers are threaded: each request thread blocks on the directory call
while the other threads keep serving. Every worker process owns one
DirectoryClient and its connection pool, created by the app factory and
closed when the worker exits.
"""
import os

wsgi_app = "directory_gateway.flask_app:create_app()"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8080")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", "8"))

# A call may take up to (retries + 1) * timeout + retries * delay seconds
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
accesslog = "-"
errorlog = "-"


def post_fork(server, worker):
    """Log the directory settings each worker starts with."""
    worker.log.info(
        "Worker %s: directory=%s retries=%s delay=%ss",
        worker.pid,
        os.environ.get("DIRECTORY_BASE_URL", "<unset>"),
        os.environ.get("DIRECTORY_MAX_RETRIES", "3"),
        os.environ.get("DIRECTORY_RETRY_DELAY", "1.0"),
    )


def worker_exit(server, worker):
    """Close the worker's pooled directory connections."""
    app = getattr(worker, "wsgi", None)
    client = getattr(app, "extensions", {}).get("directory_client")
    if client is not None:
        client.close()
        worker.log.info("Worker %s: directory connections closed", worker.pid)
