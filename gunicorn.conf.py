# ============================================
# Gunicorn Configuration for Production
# ============================================
# Usage: gunicorn -c gunicorn.conf.py run:app
# ============================================

import os
import multiprocessing

# Server socket
bind = os.getenv('GUNICORN_BIND', '0.0.0.0:5000')
backlog = 2048

# Worker processes
workers = int(os.getenv('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'  # one request per worker, one DB session per request
timeout = int(os.getenv('GUNICORN_TIMEOUT', 60))
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = 'shopnish-api'

# Logging
errorlog = '-'
accesslog = '-'
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Load the app once in the master; workers fork with the engine pool unused
preload_app = True


def post_fork(server, worker):
    """Drop pooled DB connections inherited from the master process."""
    from extensions import db
    from run import app

    with app.app_context():
        db.engine.dispose()
