# main.py
import argparse
import json
import logging
import sys

from errors import ConfigurationError, SimulationError
from geometry import (ASSOCIATIVITIES, MAX_BLOCK_SIZE, MAX_CACHE_SIZE_KB, MIN_BLOCK_SIZE,
                      MIN_CACHE_SIZE_KB, POLICY_NAMES, CacheConfiguration)
from report import format_parameters, format_results
from simulator import SimulationRunner
from visualize import plot_hit_miss_rate, plot_miss_breakdown

logger = logging.getLogger("cachesim")

USAGE = ("Usage: cachesim -f <trace file name> -s <cache size in KB>[1 KB to 8 MB] "
         "-b <block size>[4 to 64 bytes] -a <associativity>[1,2,4,8,16] "
         "-r <replacement policy>[RR,RND,LRU]")

DEFAULT_CONFIG = {
    "simulation": {"random_seed": None},
    "output": {
        "results_csv": "Trace_Results.csv",
        "summary_json": None,
        "hitmiss_plot": None,
        "miss_breakdown_plot": None,
    },
}


class ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ConfigurationError(message)


class StoreOnce(argparse.Action):
    """Reject a flag given more than once."""

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is not None:
            raise ConfigurationError(f"argument {option_string} given more than once")
        setattr(namespace, self.dest, values)


def bounded_int(low, high):
    def parse(text):
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer {text!r}")
        if not low <= value <= high:
            raise argparse.ArgumentTypeError(f"{value} is outside [{low}, {high}]")
        return value
    return parse


def associativity(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer {text!r}")
    if value not in ASSOCIATIVITIES:
        raise argparse.ArgumentTypeError(f"associativity must be one of {ASSOCIATIVITIES}")
    return value


def build_parser():
    parser = ArgumentParser(prog="cachesim", description="Trace-driven set-associative cache simulator",
                            allow_abbrev=False)
    parser.add_argument("-f", dest="trace_file", action=StoreOnce, required=True,
                        help="trace file name")
    parser.add_argument("-s", dest="cache_size_kb", action=StoreOnce, required=True,
                        type=bounded_int(MIN_CACHE_SIZE_KB, MAX_CACHE_SIZE_KB),
                        help="cache size in KB (1 to 8192)")
    parser.add_argument("-b", dest="block_size", action=StoreOnce, required=True,
                        type=bounded_int(MIN_BLOCK_SIZE, MAX_BLOCK_SIZE),
                        help="block size in bytes (4 to 64)")
    parser.add_argument("-a", dest="associativity", action=StoreOnce, required=True,
                        type=associativity, help="associativity (1, 2, 4, 8 or 16)")
    parser.add_argument("-r", dest="replacement_policy", action=StoreOnce, required=True,
                        choices=POLICY_NAMES, help="replacement policy")
    parser.add_argument("-c", "--config", action=StoreOnce, help="JSON file with output settings")
    parser.add_argument("--seed", action=StoreOnce, type=bounded_int(0, 2 ** 64 - 1),
                        help="seed for the RND policy (overrides the config file)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def parse_args(argv=None):
    args = build_parser().parse_args(argv)
    config = CacheConfiguration(
        trace_file=args.trace_file,
        cache_size_kb=args.cache_size_kb,
        block_size=args.block_size,
        associativity=args.associativity,
        replacement_policy=args.replacement_policy,
    )
    return config, args


def load_config(path=None):
    cfg = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
    if path is None:
        return cfg
    try:
        with open(path, "r") as f:
            loaded = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"unable to load config {path!r}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"config {path!r} must contain a JSON object")
    for section in cfg:
        values = loaded.get(section)
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigurationError(f"config section {section!r} must be a JSON object")
        cfg[section].update(values)

    seed = cfg["simulation"].get("random_seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigurationError(f"simulation.random_seed must be a non-negative integer, got {seed!r}")
    for key, value in cfg["output"].items():
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(f"output.{key} must be a file path, got {value!r}")
    return cfg


def main(argv=None):
    try:
        config, args = parse_args(argv)
    except ConfigurationError as exc:
        print(f"[ERROR] Invalid arguments: {exc}. {USAGE}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="[%(levelname)s] %(message)s")
    try:
        cfg = load_config(args.config)
        seed = args.seed if args.seed is not None else cfg["simulation"].get("random_seed")
        runner = SimulationRunner(config, seed=seed)
        print(format_parameters(config, runner.geometry))

        summary, results = runner.run()
        print(format_results(runner.geometry, runner.stats, results))

        out_cfg = cfg["output"]
        results_path = runner.save_results(summary, out_cfg)
        print("Results appended to:", results_path)
        if out_cfg.get("hitmiss_plot"):
            plot_hit_miss_rate(results.hit_rate, out_cfg["hitmiss_plot"])
        if out_cfg.get("miss_breakdown_plot"):
            plot_miss_breakdown(runner.stats, out_cfg["miss_breakdown_plot"])
    except SimulationError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
