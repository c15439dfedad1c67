"""
Retrievers module: collection gateways over entity stores.
"""
from .base import BaseGateway, CollectionGateway
from .jsonfile import JsonFileGateway, build_json_gateways
from .memory import InMemoryGateway

__all__ = [
    "BaseGateway",
    "CollectionGateway",
    "InMemoryGateway",
    "JsonFileGateway",
    "build_json_gateways",
]
