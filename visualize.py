# visualize.py
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


def _prepare(outpath):
    directory = os.path.dirname(outpath)
    if directory:
        os.makedirs(directory, exist_ok=True)


def plot_hit_miss_rate(hit_rate, outpath):
    """Pie chart of hit vs miss percentage. Skipped when the rate is undefined."""
    if hit_rate is None:
        return None
    _prepare(outpath)
    plt.figure(figsize=(4, 4))
    labels = ['Hit', 'Miss']
    sizes = [hit_rate, 100.0 - hit_rate]
    plt.pie(sizes, labels=labels, autopct='%1.1f%%')
    plt.title("Cache Hit/Miss Rate")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return outpath


def plot_miss_breakdown(stats, outpath):
    _prepare(outpath)
    labels = ['Hits', 'Compulsory', 'Conflict']
    counts = [stats.cache_hits, stats.compulsory_misses, stats.conflict_misses]
    plt.figure(figsize=(6, 4))
    bars = plt.bar(labels, counts, color=['tab:green', 'tab:orange', 'tab:red'])
    for bar, count in zip(bars, counts):
        plt.annotate(str(count), (bar.get_x() + bar.get_width() / 2, bar.get_height()),
                     ha='center', va='bottom')
    plt.title(f"Cache Accesses ({stats.total_cache_accesses} total)")
    plt.ylabel("Accesses")
    plt.grid(True, axis='y')
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return outpath
