# simstats.py
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from geometry import COST_PER_KB

logger = logging.getLogger(__name__)


@dataclass
class SimulationStatistics:
    total_cache_accesses: int = 0
    total_addresses: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    compulsory_misses: int = 0
    conflict_misses: int = 0
    cpi_cycles: int = 0
    num_instructions: int = 0
    logical_cycle: int = 0  # recency timestamp source

    def tick(self):
        self.logical_cycle += 1
        return self.logical_cycle

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class SimulationResults:
    hit_rate: Optional[float]
    miss_rate: Optional[float]
    cpi: Optional[float]
    unused_blocks: int
    unused_space_kb: float
    unused_space_percentage: float
    waste: float

    def as_dict(self):
        return asdict(self)


def finalize(stats, geometry, unused_blocks):
    """
    Derive rates, CPI and unused space once the trace is exhausted.
    A trace with no cache accesses has undefined hit/miss rates and one with
    no instruction fetches has an undefined CPI; both are reported as None.
    """
    if stats.total_cache_accesses:
        hit_rate = stats.cache_hits / stats.total_cache_accesses * 100
        miss_rate = 100 - hit_rate
    else:
        logger.warning("no cache accesses recorded; hit and miss rates are undefined")
        hit_rate = miss_rate = None

    if stats.num_instructions:
        cpi = stats.cpi_cycles / stats.num_instructions
    else:
        logger.warning("no instructions retired; CPI is undefined")
        cpi = None

    unused_space_kb = unused_blocks * (geometry.block_size + (geometry.tag_size + 1) / 8) / 1024
    return SimulationResults(
        hit_rate=hit_rate,
        miss_rate=miss_rate,
        cpi=cpi,
        unused_blocks=unused_blocks,
        unused_space_kb=unused_space_kb,
        unused_space_percentage=unused_space_kb / geometry.implementation_size_kb * 100,
        waste=unused_space_kb * COST_PER_KB,
    )
