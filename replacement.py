# replacement.py
import numpy as np

from errors import ConfigurationError, UnsupportedPolicy

PRETTY_NAMES = {
    "RR": "Round Robin",
    "RND": "Random",
    "LRU": "Least Recently Used",
}


def pretty_policy_name(name):
    try:
        return PRETTY_NAMES[name]
    except KeyError:
        raise ConfigurationError(f"invalid replacement policy {name!r}") from None


class RoundRobinPolicy:
    """
    One next-victim counter per row. Each conflict in a row evicts the block
    at the counter and advances it modulo the associativity, so a row cycles
    through all of its ways before repeating.
    """

    name = "RR"

    def __init__(self, associativity, num_rows):
        self.associativity = associativity
        self.counters = [0] * num_rows

    def choose_victim(self, row):
        victim = self.counters[row]
        self.counters[row] = (victim + 1) % self.associativity
        return victim


class RandomPolicy:
    name = "RND"

    def __init__(self, associativity, rng: np.random.Generator = None):
        self.associativity = associativity
        # an unseeded generator draws from OS entropy: results differ run to run
        self.rng = rng if rng is not None else np.random.default_rng()

    def choose_victim(self, row):
        return int(self.rng.integers(0, self.associativity))


def make_replacement_policy(name, associativity, num_rows, seed=None):
    """
    Build the victim-selection strategy for a policy name (RR, RND, LRU).
    LRU is accepted by the command line but has no implementation, so it
    fails here before any trace line is read.
    """
    if name == "RR":
        return RoundRobinPolicy(associativity, num_rows)
    if name == "RND":
        return RandomPolicy(associativity, np.random.default_rng(seed))
    if name == "LRU":
        raise UnsupportedPolicy("LRU not implemented, try RR or RND instead")
    raise ConfigurationError(f"invalid replacement policy {name!r}")
