import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))
PROJECT_DIR = os.path.abspath(os.path.join(BACKEND_DIR, ".."))

# Catalog + session storage: stored in <project>/data/
DATA_DIR: str = os.getenv("CIIT_DATA_DIR", os.path.join(PROJECT_DIR, "data"))
CONCEPTS_DIR: str = os.getenv("CIIT_CONCEPTS_DIR", os.path.join(DATA_DIR, "concepts"))
SESSIONS_DIR: str = os.getenv("CIIT_SESSIONS_DIR", os.path.join(DATA_DIR, "sessions"))
TOPICS_FILE: str = os.getenv("CIIT_TOPICS_FILE", os.path.join(DATA_DIR, "topics.yaml"))
BARRIERS_FILE: str = os.getenv("CIIT_BARRIERS_FILE", os.path.join(DATA_DIR, "barriers.yaml"))
IMAGES_DIR: str = os.getenv("CIIT_IMAGES_DIR", os.path.join(DATA_DIR, "images", "concepts"))

# Client-side durable cache (crash recovery for an in-progress interview)
CLIENT_CACHE_DIR: str = os.getenv(
    "CIIT_CLIENT_CACHE_DIR",
    os.path.join(os.path.expanduser("~"), ".ciit"),
)
SESSION_CACHE_KEY: str = "ciit_current_session"
AUTOSAVE_INTERVAL: float = float(os.getenv("CIIT_AUTOSAVE_INTERVAL", "30"))  # seconds

# Server
API_HOST: str = os.getenv("CIIT_API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("CIIT_API_PORT", "3001"))
API_BASE_URL: str = os.getenv("CIIT_API_BASE_URL", f"http://{API_HOST}:{API_PORT}")
LOG_LEVEL: str = os.getenv("CIIT_LOG_LEVEL", "INFO")

# Catalog file watching
CATALOG_POLL_INTERVAL: float = float(os.getenv("CIIT_CATALOG_POLL_INTERVAL", "1.0"))
CATALOG_DEBOUNCE_SECONDS: float = float(os.getenv("CIIT_CATALOG_DEBOUNCE_SECONDS", "0.3"))

# Image uploads
MAX_IMAGE_BYTES: int = int(os.getenv("CIIT_MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))  # 5 MiB
ALLOWED_IMAGE_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
