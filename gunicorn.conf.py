import multiprocessing
import os

# Application
wsgi_app = "content_agent.main:app"

# Server socket
bind = f"{os.getenv('API_HOST', '0.0.0.0')}:{os.getenv('API_PORT', '8000')}"
backlog = 2048

# Worker processes
# A suspended session is stored with its state, so any worker sharing the SQL
# store can resume it. The in-memory store is per process: one worker only.
session_store = os.getenv("SESSION_STORE", "sql").lower()
default_workers = 1 if session_store == "memory" else multiprocessing.cpu_count() + 1
workers = int(os.getenv("GUNICORN_WORKERS", default_workers))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000

# Generation streams stay open for the length of an LLM call
timeout = int(os.getenv("GUNICORN_TIMEOUT", "300"))
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")

# Process naming
proc_name = "content_agent"
