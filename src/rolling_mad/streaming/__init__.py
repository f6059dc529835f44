from .buffering import WindowBuffer
from .sources import load_observations, load_partitions, record_rows, write_records

__all__ = [
    "WindowBuffer",
    "load_observations",
    "load_partitions",
    "record_rows",
    "write_records",
]
