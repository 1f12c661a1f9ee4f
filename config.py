from decouple import config
from pathlib import Path


def get_version():
    """Get version from pyproject.toml"""
    import tomllib

    pyproject_path = Path(__file__).parent / "pyproject.toml"
    if pyproject_path.exists():
        with open(pyproject_path, 'rb') as f:
            data = tomllib.load(f)
            return data.get("project", {}).get("version", "unknown")
    return "unknown"


__version__ = get_version()

# App Configuration
APP_NAME = config('FLOWR_APP_NAME', default="flowr")

# Logging Configuration
LOG_LEVEL = config('FLOWR_LOG_LEVEL', default="INFO")
LOG_FILE = config('FLOWR_LOG_FILE', default=None)

# Stream Signing Configuration
# Endpoint that exchanges (trackId, listenerAddress) for a signed playback URL
STREAM_ENDPOINT = config('FLOWR_STREAM_ENDPOINT', default="http://127.0.0.1:8765/api/stream")
# Upstream stream service the /api/stream gateway forwards to
BACKEND_URL = config('BACKEND_URL', default="http://localhost:11111").rstrip('/')
STREAM_TIMEOUT = config('FLOWR_STREAM_TIMEOUT', default=10.0, cast=float)
LISTENER_ADDRESS = config('FLOWR_LISTENER_ADDRESS', default="")

# Optional collaborator endpoints (empty disables the feature)
STATS_ENDPOINT = config('FLOWR_STATS_ENDPOINT', default="").rstrip('/')
LIBRARY_ENDPOINT = config('FLOWR_LIBRARY_ENDPOINT', default="").rstrip('/')


def _validate_volume(value):
    """Clamp a configured volume to the [0, 1] range."""
    try:
        volume = float(value)
    except (TypeError, ValueError):
        return 0.7
    return max(0.0, min(1.0, volume))


# Player Configuration
DEFAULT_VOLUME = _validate_volume(config('FLOWR_DEFAULT_VOLUME', default="0.7"))
RESTART_THRESHOLD_SECONDS = config('FLOWR_RESTART_THRESHOLD', default=3.0, cast=float)
RESOLVER_WORKERS = config('FLOWR_RESOLVER_WORKERS', default=2, cast=int)
NOTIFICATION_HISTORY = config('FLOWR_NOTIFICATION_HISTORY', default=50, cast=int)

# API Server Configuration
API_SERVER_HOST = config('FLOWR_API_HOST', default="127.0.0.1")
API_SERVER_PORT = config('FLOWR_API_PORT', default=8765, cast=int)
