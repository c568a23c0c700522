import os

# Gunicorn settings for the portal backend.
# Run with: gunicorn -c gunicorn_config.py main:app

port = os.getenv("PORT", "8080")
bind = f"0.0.0.0:{port}"

# One worker keeps the in-process SDK load cache and scheduler single;
# concurrency comes from threads.
workers = int(os.getenv("GUNICORN_WORKERS", "1"))
threads = int(os.getenv("GUNICORN_THREADS", "8"))
worker_class = "gthread"

# Must stay above BILLING_API_TIMEOUT so gateway calls can fail cleanly first.
timeout = int(os.getenv("GUNICORN_TIMEOUT", "120"))

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

keepalive = 5
