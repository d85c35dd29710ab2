#db file
from functools import lru_cache

import certifi
from pymongo import MongoClient

from orderbot.config import MONGODB_URI, DB_NAME, CART_COLL


@lru_cache(maxsize=1)
def _client() -> MongoClient:
    if not MONGODB_URI:
        raise RuntimeError("MONGODB_URI is empty. Set it in .env to use CART_STORE=mongo")
    return MongoClient(
        MONGODB_URI,
        tls=True,
        tlsCAFile=certifi.where(),
        serverSelectionTimeoutMS=30000,
    )


def carts_collection():
    coll = _client()[DB_NAME][CART_COLL]
    coll.create_index("session_id", unique=True)
    return coll
