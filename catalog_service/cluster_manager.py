from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from config import SERVER_SELECTION_TIMEOUT_MS
from logger import logger


def connect_to_cluster(mongo_uri: str) -> MongoClient:
    """Create and test a MongoClient connection."""
    client = MongoClient(mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    try:
        client.admin.command("ping")  # force connection test
        return client
    except ServerSelectionTimeoutError:
        client.close()
        logger.error("Server selection timed out for %s", mongo_uri)
        raise ConnectionError("Connection timed out. Check your MongoDB URI and network.")
    except ConnectionFailure:
        client.close()
        logger.error("Connection to %s failed", mongo_uri)
        raise ConnectionError("Failed to connect to MongoDB cluster")
    except PyMongoError as e:
        client.close()
        logger.error("Connection check against %s failed: %s", mongo_uri, e)
        raise ConnectionError(f"MongoDB rejected the connection: {e}")
