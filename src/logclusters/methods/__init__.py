"""
Clustering methods registry and factory.
"""

from .base import ClusteringMethod
from .dbscan import DBSCANMethod

# Registry of available methods
METHOD_REGISTRY = {
    "dbscan": DBSCANMethod,
}


def get_method(method_name: str, config: dict) -> ClusteringMethod:
    """Factory to create a clustering method

    Args:
        method_name: Name of the method (e.g., 'dbscan')
        config: Configuration dict for the method

    Returns:
        Instance of the clustering method

    Raises:
        ValueError: If method_name is not registered
    """
    if method_name not in METHOD_REGISTRY:
        available = ", ".join(METHOD_REGISTRY.keys())
        raise ValueError(f"Unknown method '{method_name}'. Available methods: {available}")

    method_class = METHOD_REGISTRY[method_name]
    return method_class(config)


def list_methods() -> list[str]:
    """List all available clustering methods"""
    return list(METHOD_REGISTRY.keys())


__all__ = [
    "ClusteringMethod",
    "DBSCANMethod",
    "get_method",
    "list_methods",
]
