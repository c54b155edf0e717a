"""Database package: shared Redis client and the temp collection gateway."""

from statesync.db.redis import bind_redis, close_redis, get_redis, init_redis
from statesync.db.temp_collections import TempCollectionGateway, get_temp_collection_gateway

__all__ = [
    "TempCollectionGateway",
    "bind_redis",
    "close_redis",
    "get_redis",
    "get_temp_collection_gateway",
    "init_redis",
]
