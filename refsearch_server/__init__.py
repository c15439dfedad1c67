"""Reference Search Server - universal search over shops, products, menus, services and offices."""
from .core.config import DEFAULT_MAX_RESULTS, MAX_RESULTS_CAP, get_data_dir, get_remote_config
from .models.schema import EntityKind
from .reference.codec import decode, encode, is_valid, route_path
from .search.service import SearchService, build_search_service

__all__ = [
    "EntityKind",
    "SearchService",
    "build_search_service",
    "encode",
    "decode",
    "is_valid",
    "route_path",
    "DEFAULT_MAX_RESULTS",
    "MAX_RESULTS_CAP",
    "get_data_dir",
    "get_remote_config",
]
