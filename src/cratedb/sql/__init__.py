from cratedb.sql.exc import *

__version__ = "1.0.0"


def connect(nodes, **kwargs) -> "Cluster":
    """
    Create a Cluster from a list of node URLs or a comma-separated string of them.

    Example:
        with cratedb.sql.connect("http://localhost:4200") as cluster:
            duration, rows = cluster.query("select 1")
    """
    from .client import Cluster

    if isinstance(nodes, str):
        return Cluster.from_string(nodes, **kwargs)
    return Cluster(nodes, **kwargs)
