# simulator.py
import json
import logging
import os
from dataclasses import asdict

from cache import SetAssociativeCache, row_count
from errors import ResourceError
from geometry import calculate_geometry
from replacement import make_replacement_policy
from report import append_csv
from simstats import SimulationStatistics, finalize
from tracefile import TraceProcessor

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_CSV = "Trace_Results.csv"


class SimulationRunner:
    def __init__(self, config, seed=None):
        """
        Size the cache for `config` and pick its replacement policy.
        Policy errors (LRU, unknown names) surface here, before the trace
        file is touched. `seed` makes the RND policy reproducible.
        """
        self.config = config
        self.geometry = calculate_geometry(config)
        self.policy = make_replacement_policy(
            config.replacement_policy,
            config.associativity,
            row_count(self.geometry),
            seed=seed,
        )
        self.stats = SimulationStatistics()
        self.cache = SetAssociativeCache(self.geometry, self.policy, self.stats)
        self.processor = TraceProcessor(self.cache, self.geometry, self.stats)
        self.results = None

    def run(self):
        logger.info("simulating %s (%d blocks, %d rows)", self.config.trace_file,
                    self.geometry.num_blocks, self.geometry.num_rows)
        records = self.processor.process_file(self.config.trace_file)
        self.results = finalize(self.stats, self.geometry, self.cache.unused_blocks())

        summary = {
            "configuration": asdict(self.config),
            "geometry": asdict(self.geometry),
            "records": records,
            "cache": self.cache.stats_summary(),
            "statistics": self.stats.as_dict(),
            "results": self.results.as_dict(),
        }
        return summary, self.results

    def save_results(self, summary, out_cfg):
        """
        Append this run's row to the results CSV and, when `summary_json` is
        configured, dump the summary there too. Returns the CSV path.
        """
        if self.results is None:
            raise RuntimeError("save_results() called before run()")
        csv_path = out_cfg.get("results_csv") or DEFAULT_RESULTS_CSV
        append_csv(csv_path, self.config, self.geometry, self.results)

        json_path = out_cfg.get("summary_json")
        if json_path:
            try:
                directory = os.path.dirname(json_path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                with open(json_path, "w") as f:
                    json.dump(summary, f, indent=2)
            except OSError as exc:
                raise ResourceError(f"unable to write summary {json_path!r}: {exc}") from exc
        return csv_path
