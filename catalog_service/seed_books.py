"""
Sample ``books`` collection for running the catalog examples.

Usage:
    query-catalog seed [--uri URI] [--database NAME] [--no-drop]
"""

from typing import Any, Dict, List

from cluster_manager import connect_to_cluster
from logger import logger

# every bundled example queries db.books
BOOKS_COLLECTION = "books"

BOOKS: List[Dict[str, Any]] = [
    {"title": "Clean Code", "author": "Robert C. Martin", "genre": "Programming",
     "published_year": 2008, "price": 39.99, "in_stock": True, "pages": 464,
     "publisher": "Prentice Hall"},
    {"title": "Clean Architecture", "author": "Robert C. Martin", "genre": "Programming",
     "published_year": 2017, "price": 34.5, "in_stock": True, "pages": 432,
     "publisher": "Prentice Hall"},
    {"title": "The Clean Coder", "author": "Robert C. Martin", "genre": "Programming",
     "published_year": 2011, "price": 29.99, "in_stock": False, "pages": 256,
     "publisher": "Prentice Hall"},
    {"title": "The Pragmatic Programmer", "author": "Andrew Hunt", "genre": "Programming",
     "published_year": 1999, "price": 42.0, "in_stock": True, "pages": 352,
     "publisher": "Addison-Wesley"},
    {"title": "Refactoring", "author": "Martin Fowler", "genre": "Programming",
     "published_year": 2018, "price": 47.99, "in_stock": True, "pages": 448,
     "publisher": "Addison-Wesley"},
    {"title": "Designing Data-Intensive Applications", "author": "Martin Kleppmann",
     "genre": "Databases", "published_year": 2017, "price": 49.99, "in_stock": True,
     "pages": 616, "publisher": "O'Reilly Media"},
    {"title": "MongoDB: The Definitive Guide", "author": "Shannon Bradshaw",
     "genre": "Databases", "published_year": 2019, "price": 44.99, "in_stock": False,
     "pages": 514, "publisher": "O'Reilly Media"},
    {"title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction",
     "published_year": 1965, "price": 12.99, "in_stock": True, "pages": 617,
     "publisher": "Chilton Books"},
    {"title": "Neuromancer", "author": "William Gibson", "genre": "Science Fiction",
     "published_year": 1984, "price": 10.5, "in_stock": True, "pages": 271,
     "publisher": "Ace"},
    {"title": "Project Hail Mary", "author": "Andy Weir", "genre": "Science Fiction",
     "published_year": 2021, "price": 18.99, "in_stock": True, "pages": 496,
     "publisher": "Ballantine Books"},
    {"title": "Sapiens", "author": "Yuval Noah Harari", "genre": "History",
     "published_year": 2011, "price": 22.0, "in_stock": False, "pages": 443,
     "publisher": "Harper"},
    {"title": "The Code Book", "author": "Simon Singh", "genre": "History",
     "published_year": 1999, "price": 16.75, "in_stock": True, "pages": 432,
     "publisher": "Doubleday"},
]


def seed_books(
    mongo_uri: str,
    database_name: str,
    collection_name: str = BOOKS_COLLECTION,
    drop: bool = True,
) -> int:
    """Insert ``BOOKS`` into the collection and return how many were inserted.

    With ``drop`` the collection is emptied first so repeated runs give
    the same data set.
    """
    client = connect_to_cluster(mongo_uri)
    try:
        collection = client[database_name][collection_name]
        if drop:
            collection.drop()
        # insert_many mutates its documents (adds _id); keep BOOKS pristine
        result = collection.insert_many([dict(book) for book in BOOKS])
        inserted = len(result.inserted_ids)
    finally:
        client.close()

    logger.info("Seeded %d books into %s.%s", inserted, database_name, collection_name)
    return inserted
