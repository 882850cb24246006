# geometry.py
import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ADDRESS_BITS = 32
COST_PER_KB = 0.09

MIN_CACHE_SIZE_KB, MAX_CACHE_SIZE_KB = 1, 8192
MIN_BLOCK_SIZE, MAX_BLOCK_SIZE = 4, 64
ASSOCIATIVITIES = (1, 2, 4, 8, 16)
POLICY_NAMES = ("RR", "RND", "LRU")


@dataclass(frozen=True)
class CacheConfiguration:
    trace_file: str
    cache_size_kb: int
    block_size: int
    associativity: int
    replacement_policy: str


@dataclass(frozen=True)
class CacheGeometry:
    cache_size_kb: int
    block_size: int
    associativity: int
    num_blocks: int
    num_rows: int
    offset_size: int
    index_size: int
    tag_size: int
    overhead_bytes: int
    implementation_size_bytes: int
    implementation_size_kb: float
    cost: float


def log2_floor(n):
    """
    Integer field width for n entries. Values that are not a power of two
    are truncated, so callers get a usable (if lossy) width.
    """
    return int(math.floor(math.log2(n)))


def is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def calculate_geometry(config: CacheConfiguration) -> CacheGeometry:
    """
    Derive block/row counts, address field widths and implementation cost
    from the configuration. Divisions truncate.
    """
    size_bytes = config.cache_size_kb * 1024
    num_blocks = size_bytes // config.block_size
    num_rows = num_blocks // config.associativity

    for label, value in (("block size", config.block_size), ("row count", num_rows)):
        if not is_power_of_two(value):
            logger.warning("%s %d is not a power of two; field widths are truncated", label, value)

    offset_size = log2_floor(config.block_size)
    index_size = log2_floor(num_rows)
    tag_size = ADDRESS_BITS - index_size - offset_size

    # one valid bit plus the tag per block
    overhead_bytes = num_blocks * (tag_size + 1) // 8
    implementation_size_bytes = size_bytes + overhead_bytes
    implementation_size_kb = implementation_size_bytes / 1024.0

    return CacheGeometry(
        cache_size_kb=config.cache_size_kb,
        block_size=config.block_size,
        associativity=config.associativity,
        num_blocks=num_blocks,
        num_rows=num_rows,
        offset_size=offset_size,
        index_size=index_size,
        tag_size=tag_size,
        overhead_bytes=overhead_bytes,
        implementation_size_bytes=implementation_size_bytes,
        implementation_size_kb=implementation_size_kb,
        cost=implementation_size_kb * COST_PER_KB,
    )
