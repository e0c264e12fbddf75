import os
from datetime import datetime

# ---------------- Configuration Constants ----------------

MB = 1024 * 1024
DEFAULT_CHUNK_SIZE = 2 * MB  # bytes, overridden by CHUNK_SIZE
SMALL_FILE_THRESHOLD = 2 * MB  # files at or below are not chunked, overridden by SMALL_FILE_THRESHOLD
LOG_DIR = os.getenv("CHUNKUP_LOG_DIR", os.path.join(os.path.dirname(__file__), "logs"))
SAVE_DIR = os.getenv(
    "CHUNKUP_SAVE_DIR",
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "saved"))
)

# ---------------- Shared Logging Function ----------------

def log(message, context="CHUNKER"):
    timestamp = datetime.now().strftime("[%Y-%m-%d %H:%M:%S]")
    formatted = f"[{context}] {timestamp} {message}"

    os.makedirs(LOG_DIR, exist_ok=True)
    log_file = os.path.join(LOG_DIR, f"{context.lower()}.log")
    with open(log_file, "a") as f:
        f.write(formatted + "\n")

    print(formatted)

# ---------------- Public API ----------------

__all__ = ["MB", "DEFAULT_CHUNK_SIZE", "SMALL_FILE_THRESHOLD", "LOG_DIR", "SAVE_DIR", "log"]
