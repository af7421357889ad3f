"""
Database executor: runs parsed shell commands through pymongo with
timeout protection, result caps and a write guard.
"""

from typing import Any, Dict, List

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import ExecutionTimeout

from catalog import Example
from cluster_manager import connect_to_cluster
from config import QUERY_TIMEOUT_MS
from logger import logger
from shell_parser import parse_shell

# ---------------------- CONSTANTS ----------------------

MAX_RESULTS = 100

READ_METHODS = {"find", "findOne", "countDocuments", "distinct", "aggregate"}
WRITE_METHODS = {
    "insertOne", "insertMany",
    "updateOne", "updateMany", "replaceOne",
    "deleteOne", "deleteMany",
    "createIndex", "dropIndex",
}
FIND_MODIFIERS = {"sort", "skip", "limit", "explain", "count"}


class UnsupportedCommandError(ValueError):
    pass


class WriteNotAllowedError(PermissionError):
    pass


# ---------------------- HELPERS ----------------------

def _stringify_ids(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert ObjectId fields to strings so they are JSON-serialisable."""
    for doc in docs:
        if isinstance(doc.get("_id"), ObjectId):
            doc["_id"] = str(doc["_id"])
    return docs


def _arg(args: List[Any], index: int, default: Any = None) -> Any:
    return args[index] if len(args) > index else default


def _key_spec(spec: Dict[str, Any]) -> List[tuple]:
    """``{title: 1, year: -1}`` → ``[("title", 1), ("year", -1)]``."""
    if not isinstance(spec, dict) or not spec:
        raise UnsupportedCommandError("key specification must be a non-empty object")
    return list(spec.items())


# ---------------------- FIND ----------------------

def _run_find(collection: Collection, command: Dict[str, Any], max_results: int) -> Dict[str, Any]:
    args = command["args"]
    mongo_filter = _arg(args, 0) or {}
    projection = _arg(args, 1)

    sort = None
    skip = 0
    limit = None
    explain = None
    for modifier in command["modifiers"]:
        method, mod_args = modifier["method"], modifier["args"]
        if method not in FIND_MODIFIERS:
            raise UnsupportedCommandError(f"Unsupported cursor method: {method}()")
        if method == "sort":
            sort = _key_spec(_arg(mod_args, 0))
        elif method == "skip":
            skip = int(_arg(mod_args, 0, 0))
        elif method == "limit":
            limit = int(_arg(mod_args, 0, 0))
        elif method == "explain":
            explain = _arg(mod_args, 0, "queryPlanner")
        elif method == "count":
            count = collection.count_documents(mongo_filter, maxTimeMS=QUERY_TIMEOUT_MS)
            return {"operation": "count", "count": count}

    if explain is not None:
        find_cmd: Dict[str, Any] = {"find": collection.name, "filter": mongo_filter}
        if projection:
            find_cmd["projection"] = projection
        if sort:
            find_cmd["sort"] = dict(sort)
        if skip:
            find_cmd["skip"] = skip
        if limit:
            find_cmd["limit"] = limit
        plan = collection.database.command(
            {"explain": find_cmd, "verbosity": explain, "maxTimeMS": QUERY_TIMEOUT_MS}
        )
        return {"operation": "explain", "verbosity": explain, "plan": plan}

    # a shell limit of 0 means "no limit"
    effective_limit = min(limit, max_results) if limit else max_results

    cursor = collection.find(mongo_filter, projection, max_time_ms=QUERY_TIMEOUT_MS)
    if sort:
        cursor = cursor.sort(sort)
    cursor = cursor.skip(skip).limit(effective_limit)

    docs = _stringify_ids(list(cursor))
    return {"operation": "find", "data": docs, "result_count": len(docs)}


# ---------------------- WRITES ----------------------

def _run_write(collection: Collection, method: str, args: List[Any]) -> Dict[str, Any]:
    if method == "insertOne":
        result = collection.insert_one(_arg(args, 0, {}))
        return {"operation": method, "inserted_id": str(result.inserted_id)}
    if method == "insertMany":
        result = collection.insert_many(_arg(args, 0, []))
        return {"operation": method, "inserted_ids": [str(i) for i in result.inserted_ids]}

    if method in ("updateOne", "updateMany", "replaceOne"):
        options = _arg(args, 2) or {}
        upsert = bool(options.get("upsert", False))
        fn = {
            "updateOne": collection.update_one,
            "updateMany": collection.update_many,
            "replaceOne": collection.replace_one,
        }[method]
        result = fn(_arg(args, 0, {}), _arg(args, 1, {}), upsert=upsert)
        return {
            "operation": method,
            "matched_count": result.matched_count,
            "modified_count": result.modified_count,
            "upserted_id": str(result.upserted_id) if result.upserted_id is not None else None,
        }

    if method in ("deleteOne", "deleteMany"):
        fn = collection.delete_one if method == "deleteOne" else collection.delete_many
        result = fn(_arg(args, 0, {}))
        return {"operation": method, "deleted_count": result.deleted_count}

    if method == "createIndex":
        options = _arg(args, 1) or {}
        name = collection.create_index(_key_spec(_arg(args, 0)), **options)
        return {"operation": method, "index_name": name}

    # dropIndex
    target = _arg(args, 0)
    if isinstance(target, dict):
        target = _key_spec(target)
    collection.drop_index(target)
    return {"operation": method, "dropped": True}


# ---------------------- MAIN COMMAND EXECUTOR ----------------------

def execute_command(
    collection: Collection,
    command: Dict[str, Any],
    allow_writes: bool = False,
    max_results: int = MAX_RESULTS,
) -> Dict[str, Any]:
    """Run one parsed shell command against *collection*.

    Reads are capped at ``max_results`` documents (never more than
    ``MAX_RESULTS``) and run with ``maxTimeMS``.  Writes raise
    ``WriteNotAllowedError`` unless ``allow_writes`` is set.
    """
    method = command["method"]
    args = command.get("args", [])
    max_results = min(max(1, max_results), MAX_RESULTS)

    if method in WRITE_METHODS:
        if not allow_writes:
            logger.warning("Refused write command %s on %s", method, collection.name)
            raise WriteNotAllowedError(
                f"{method}() modifies the database; enable writes to run it."
            )
        if command.get("modifiers"):
            raise UnsupportedCommandError(f"{method}() does not take cursor methods")
        logger.info("Executing write %s on %s", method, collection.name)
        return _run_write(collection, method, args)

    if method not in READ_METHODS:
        raise UnsupportedCommandError(f"Unsupported method: {method}()")

    try:
        if method == "find":
            return _run_find(collection, command, max_results)

        if command.get("modifiers"):
            raise UnsupportedCommandError(f"{method}() does not take cursor methods")

        if method == "findOne":
            doc = collection.find_one(
                _arg(args, 0) or {}, _arg(args, 1), max_time_ms=QUERY_TIMEOUT_MS,
            )
            data = _stringify_ids([doc]) if doc is not None else []
            return {"operation": method, "data": data, "result_count": len(data)}

        if method == "countDocuments":
            count = collection.count_documents(_arg(args, 0) or {}, maxTimeMS=QUERY_TIMEOUT_MS)
            return {"operation": method, "count": count}

        if method == "distinct":
            values = collection.distinct(
                _arg(args, 0), _arg(args, 1) or {}, maxTimeMS=QUERY_TIMEOUT_MS,
            )
            return {"operation": method, "values": values[:max_results]}

        # aggregate
        pipeline = _arg(args, 0, [])
        if not isinstance(pipeline, list):
            raise UnsupportedCommandError("aggregate() expects a pipeline array")
        docs = _stringify_ids(
            list(collection.aggregate(pipeline, maxTimeMS=QUERY_TIMEOUT_MS))[:max_results]
        )
        return {"operation": method, "data": docs, "result_count": len(docs)}

    except ExecutionTimeout:
        raise TimeoutError("Query timed out after exceeding the time limit.")


def run_example(
    mongo_uri: str,
    database_name: str,
    example: Example,
    allow_writes: bool = False,
) -> Dict[str, Any]:
    """Execute every statement of *example*, one result per statement."""
    commands = parse_shell(example.query_text)
    logger.info(
        "Running example %d (%s): %d statement(s) against %s",
        example.number, example.category.value, len(commands), database_name,
    )

    client = connect_to_cluster(mongo_uri)
    try:
        db = client[database_name]
        results = [
            execute_command(db[command["collection"]], command, allow_writes=allow_writes)
            for command in commands
        ]
    finally:
        client.close()

    return {"example": example.number, "results": results}
