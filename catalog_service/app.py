"""
FastAPI service for the MongoDB query example catalog.

Endpoints:
- ``GET  /examples``               list examples (optionally by category)
- ``GET  /examples/{number}``      one example
- ``GET  /categories``             example count per category
- ``POST /examples/{number}/run``  execute an example against MongoDB
- ``POST /seed``                   load the sample ``books`` collection
"""

from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from catalog import (
    ExampleNotFoundError,
    UnknownCategoryError,
    category_counts,
    filter_by_category,
    get_example,
    load,
)
from config import ALLOW_WRITES, DATABASE_NAME, MONGO_URI
from db_executor import UnsupportedCommandError, WriteNotAllowedError, run_example
from logger import logger
from response_formatter import example_summary, format_run_result
from seed_books import seed_books
from shell_parser import ShellSyntaxError

VERSION = "1.0.0"

app = FastAPI(title="MongoDB Query Example Catalog", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------- REQUEST MODELS ----------------------


class RunRequest(BaseModel):
    mongo_uri: Optional[str] = None
    database_name: Optional[str] = None
    allow_writes: Optional[bool] = None


class SeedRequest(BaseModel):
    mongo_uri: Optional[str] = None
    database_name: Optional[str] = None
    drop: bool = True


# ---------------------- ENDPOINTS ----------------------


@app.get("/examples")
def list_examples(category: Optional[str] = None):
    try:
        examples = filter_by_category(category) if category else load()
    except UnknownCategoryError as e:
        logger.warning("list-examples: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "total": len(examples),
        "examples": [example_summary(ex) for ex in examples],
    }


@app.get("/examples/{number}")
def show_example(number: int):
    try:
        return example_summary(get_example(number))
    except ExampleNotFoundError as e:
        logger.warning("show-example: %s", e)
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/categories")
def list_categories():
    return {"categories": category_counts()}


@app.post("/examples/{number}/run")
def run(number: int, request: Optional[RunRequest] = None):
    """Execute every statement of an example and return the results."""
    request = request or RunRequest()
    try:
        example = get_example(number)
    except ExampleNotFoundError as e:
        logger.warning("run example: %s", e)
        raise HTTPException(status_code=404, detail=str(e))

    allow_writes = ALLOW_WRITES if request.allow_writes is None else request.allow_writes

    try:
        result = run_example(
            request.mongo_uri or MONGO_URI,
            request.database_name or DATABASE_NAME,
            example,
            allow_writes=allow_writes,
        )
    except (ShellSyntaxError, UnsupportedCommandError) as e:
        logger.warning("run example %d: %s", number, e)
        raise HTTPException(status_code=400, detail=str(e))
    except WriteNotAllowedError as e:
        logger.warning("run example %d refused: %s", number, e)
        raise HTTPException(status_code=403, detail=str(e))
    except TimeoutError:
        logger.warning("run example %d timed out", number)
        raise HTTPException(
            status_code=408,
            detail="Query timed out. Try again against a smaller collection.",
        )
    except Exception as e:
        logger.error("run example %d failed: %s", number, e)
        raise HTTPException(status_code=500, detail=f"Query execution error: {e}")

    return format_run_result(example, result)


@app.post("/seed")
def seed(request: Optional[SeedRequest] = None):
    request = request or SeedRequest()
    database_name = request.database_name or DATABASE_NAME
    try:
        inserted = seed_books(request.mongo_uri or MONGO_URI, database_name, drop=request.drop)
    except Exception as e:
        logger.error("seed failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    return {"inserted": inserted, "database": database_name}


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION, "examples": len(load())}
