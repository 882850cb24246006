# report.py
import csv
import os

from errors import ResourceError
from replacement import pretty_policy_name

UNDEFINED = "undefined"


def _rate(value, fmt):
    return UNDEFINED if value is None else format(value, fmt)


def format_parameters(config, geometry):
    lines = [
        "Cache Simulator",
        "",
        f"Trace File: {config.trace_file}",
        "",
        "***** Cache Input Parameters *****",
        f"{'Cache Size:':<32}{config.cache_size_kb} KB",
        f"{'Block Size:':<32}{config.block_size} bytes",
        f"{'Associativity:':<32}{config.associativity}",
        f"{'Replacement Policy:':<32}{pretty_policy_name(config.replacement_policy)}",
        "",
        "***** Cache Calculated Values *****",
        "",
        f"{'Total # Blocks:':<32}{geometry.num_blocks}",
        f"{'Tag Size:':<32}{geometry.tag_size} bits",
        f"{'Index Size:':<32}{geometry.index_size} bits",
        f"{'Total # Rows:':<32}{geometry.num_rows}",
        f"{'Overhead Size:':<32}{geometry.overhead_bytes} bytes",
        f"{'Implementation Memory Size:':<32}{geometry.implementation_size_kb:.2f} KB "
        f"({geometry.implementation_size_bytes} bytes)",
        f"{'Cost:':<32}${geometry.cost:.2f}",
        "",
    ]
    return "\n".join(lines)


def format_results(geometry, stats, results):
    hit = _rate(results.hit_rate, ".4f")
    miss = _rate(results.miss_rate, ".4f")
    cpi = _rate(results.cpi, ".2f")
    lines = [
        "***** CACHE SIMULATION RESULTS *****",
        "",
        f"{'Total Cache Accesses:':<24}{stats.total_cache_accesses:<7}({stats.total_addresses} addresses)",
        f"{'Cache Hits:':<24}{stats.cache_hits}",
        f"{'Cache Misses:':<24}{stats.cache_misses}",
        f"{'--- Compulsory Misses:':<27}{stats.compulsory_misses}",
        f"{'--- Conflict Misses:':<27}{stats.conflict_misses}",
        "",
        "",
        "***** ***** CACHE HIT & MISS RATE: ***** *****",
        "",
        f"{'Hit':<5}{'Rate:':<18}{hit}%",
        f"{'Miss':<5}{'Rate:':<18}{miss}%",
        f"{'CPI:':<23}{cpi} Cycles/Instruction  ({stats.num_instructions})",
        f"{'Unused Cache Space:':<23}{results.unused_space_kb:.2f} KB / {geometry.implementation_size_kb:.2f} KB"
        f" = {results.unused_space_percentage:.2f}%  Waste: ${results.waste:.2f}",
        f"{'Unused Cache Blocks:':<23}{results.unused_blocks} / {geometry.num_blocks}",
        "",
    ]
    return "\n".join(lines)


def csv_row(config, geometry, results):
    return [
        config.trace_file,
        config.cache_size_kb,
        config.block_size,
        config.associativity,
        pretty_policy_name(config.replacement_policy),
        geometry.num_blocks,
        geometry.num_rows,
        geometry.overhead_bytes,
        f"{geometry.implementation_size_kb:.6f}",
        f"{geometry.cost:.6f}",
        _rate(results.hit_rate, ".6f"),
        _rate(results.miss_rate, ".6f"),
        _rate(results.cpi, ".6f"),
        f"{results.unused_space_kb:.6f}",
        f"{results.unused_space_percentage:.6f}",
        f"{results.waste:.6f}",
    ]


def append_csv(path, config, geometry, results):
    """Append one result row, creating the file (and its directory) if absent."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a", newline="") as f:
            csv.writer(f).writerow(csv_row(config, geometry, results))
    except OSError as exc:
        raise ResourceError(f"unable to append results to {path!r}: {exc}") from exc
