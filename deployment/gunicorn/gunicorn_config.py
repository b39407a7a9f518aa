import os

bind = os.getenv("GUNICORN_BIND", "unix:/var/www/crop-ledger/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", 3))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Reports are recomputed per request; large farms need headroom
timeout = 90
keepalive = 5

# Logging
accesslog = "/var/log/crop-ledger/access.log"
errorlog = "/var/log/crop-ledger/error.log"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

# Process naming
proc_name = "crop-ledger"

# Server mechanics
daemon = False
pidfile = "/var/run/crop-ledger/gunicorn.pid"
umask = 0o007


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Crop Ledger API ready; spawning %s workers", server.cfg.workers)


def worker_abort(worker):
    """Called when a worker times out (usually a slow report)."""
    worker.log.warning("Worker %s aborted", worker.pid)
