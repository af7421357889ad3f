import os
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "bookstore")

# Path to a custom examples file; empty means the bundled queries source.
QUERIES_FILE = os.getenv("QUERIES_FILE", "")

# Writes (update/delete/createIndex …) are refused unless this is set.
ALLOW_WRITES = os.getenv("ALLOW_WRITES", "false").strip().lower() in ("1", "true", "yes")

QUERY_TIMEOUT_MS = int(os.getenv("QUERY_TIMEOUT_MS", "5000"))
SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("SERVER_SELECTION_TIMEOUT_MS", "5000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
