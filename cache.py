# cache.py
import enum
import logging

from errors import ResourceError

logger = logging.getLogger(__name__)


class AccessResult(enum.Enum):
    HIT = 1
    COMPULSORY_MISS = 2
    CONFLICT_MISS = 3


class CacheBlock:
    __slots__ = ("valid", "tag", "timestamp")

    def __init__(self):
        self.valid = False
        self.tag = None
        self.timestamp = 0


def row_count(geometry):
    """Number of distinct row start positions in the block array."""
    return -(-geometry.num_blocks // geometry.associativity)


class SetAssociativeCache:
    """
    Set-associative cache model over a flat block array.
    A row is `associativity` consecutive blocks starting at
    (index * associativity) mod num_blocks, so index values past the last
    row wrap around instead of failing.
    """

    def __init__(self, geometry, policy, stats):
        self.geometry = geometry
        self.associativity = geometry.associativity
        self.num_blocks = geometry.num_blocks
        self.policy = policy
        self.stats = stats
        # miss penalty: one block transfer counted in 4-byte words
        self.miss_cycles = 4 * (geometry.block_size // 4)
        try:
            self.blocks = [CacheBlock() for _ in range(self.num_blocks)]
        except MemoryError as exc:
            raise ResourceError(f"unable to allocate {self.num_blocks} cache blocks") from exc

    def _row(self, index):
        start = (index * self.associativity) % self.num_blocks
        return start // self.associativity, [
            self.blocks[(start + j) % self.num_blocks] for j in range(self.associativity)
        ]

    def access(self, tag, index):
        """
        Look up `tag` in the row selected by `index`, filling or replacing a
        block on a miss. Updates the hit/miss counters and cycle count and
        returns the AccessResult.
        """
        stats = self.stats
        row, blocks = self._row(index)

        for block in blocks:
            if block.valid and block.tag == tag:
                block.timestamp = stats.logical_cycle
                stats.cache_hits += 1
                stats.cpi_cycles += 1
                return AccessResult.HIT

        stats.cpi_cycles += self.miss_cycles
        stats.cache_misses += 1

        for block in blocks:
            if not block.valid:
                self._install(block, tag)
                stats.compulsory_misses += 1
                return AccessResult.COMPULSORY_MISS

        victim = self.policy.choose_victim(row)
        logger.debug("row %d full, evicting way %d (tag %#x -> %#x)", row, victim, blocks[victim].tag, tag)
        self._install(blocks[victim], tag)
        stats.conflict_misses += 1
        return AccessResult.CONFLICT_MISS

    def _install(self, block, tag):
        block.valid = True
        block.tag = tag
        block.timestamp = self.stats.logical_cycle

    def unused_blocks(self):
        return sum(1 for block in self.blocks if not block.valid)

    def stats_summary(self):
        return {
            "num_blocks": self.num_blocks,
            "num_rows": self.geometry.num_rows,
            "associativity": self.associativity,
            "used_blocks": self.num_blocks - self.unused_blocks(),
        }
