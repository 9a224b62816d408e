# Gunicorn settings for the membership registry, all overridable from the environment
import multiprocessing
import os


def env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_str(name: str, default: str) -> str:
    value = os.environ.get(name)
    return value if value is not None and value.strip() != "" else default


wsgi_app = "main:app"
bind = f"0.0.0.0:{env_int('PORT', 5051)}"

# Registrations are short request/response cycles; 2 * cores + 1 sync workers
cores = multiprocessing.cpu_count() or 1
workers = env_int("GUNICORN_WORKERS", 2 * cores + 1)
worker_class = env_str("GUNICORN_WORKER_CLASS", "sync")

keepalive = env_int("GUNICORN_KEEPALIVE", 5)

# Recycle workers periodically; photo handling and QR rendering hold Pillow buffers
max_requests = env_int("GUNICORN_MAX_REQUESTS", 1000)
max_requests_jitter = env_int("GUNICORN_MAX_REQUESTS_JITTER", 100)

# Photo uploads over slow links need some headroom
timeout = env_int("GUNICORN_TIMEOUT", 60)
graceful_timeout = env_int("GUNICORN_GRACEFUL_TIMEOUT", 30)

# Log to stdout/stderr for container visibility
accesslog = "-"
errorlog = "-"
loglevel = env_str("GUNICORN_LOGLEVEL", "info")

# Header limits; the body size is capped by MAX_CONTENT_LENGTH in the app
limit_request_line = 8190
limit_request_fields = 100
limit_request_field_size = 8190
