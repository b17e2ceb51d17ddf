# arcade_be/utils/slot_helper.py
"""
Reel model, symbol sampling and reward evaluation for the three-reel slot machine.

Everything in here is pure computation over in-memory configuration: no Flask,
no logging. The spin service and the simulators build on these pieces.
"""
import random
from collections import Counter
from fractions import Fraction
from types import MappingProxyType


# --- Constants ---
SPIN_COST = 1
INITIAL_BALANCE = 20
REEL_COUNT = 3

REELS = (
    ("cherry", "lemon", "apple", "lemon", "banana", "banana", "lemon", "lemon"),
    ("lemon", "apple", "lemon", "lemon", "cherry", "apple", "banana", "lemon"),
    ("lemon", "apple", "lemon", "apple", "cherry", "lemon", "banana", "lemon"),
)

# Keyed by (match_count, symbol). A lemon pair has no entry and pays nothing.
REWARDS = {
    (3, "cherry"): 50,
    (2, "cherry"): 40,
    (3, "apple"): 20,
    (2, "apple"): 10,
    (3, "banana"): 15,
    (2, "banana"): 5,
    (3, "lemon"): 3,
}


class ReelSet:
    """Immutable ordered collection of reels. Symbol frequency on a reel is its draw weight."""

    def __init__(self, reels):
        reels = tuple(tuple(reel) for reel in reels)
        if len(reels) != REEL_COUNT:
            raise ValueError(f"A reel set needs exactly {REEL_COUNT} reels, got {len(reels)}.")
        for index, reel in enumerate(reels):
            if not reel:
                raise ValueError(f"Reel {index} must contain at least one symbol.")
        self._reels = reels

    def __len__(self):
        return len(self._reels)

    def __iter__(self):
        return iter(self._reels)

    def __getitem__(self, index):
        return self._reels[index]

    def __repr__(self):
        return f"<ReelSet reels={[len(reel) for reel in self._reels]}>"

    def symbols(self):
        """All distinct symbols across every reel, sorted."""
        return sorted({symbol for reel in self._reels for symbol in reel})


class RewardTable:
    """Immutable (match_count, symbol) -> payout lookup. Unmapped keys pay 0."""

    def __init__(self, rewards):
        validated = {}
        for key, payout in rewards.items():
            match_count, symbol = key
            if not isinstance(match_count, int) or match_count < 2:
                raise ValueError(f"Invalid match count {match_count!r} for symbol {symbol!r}.")
            if isinstance(payout, bool) or not isinstance(payout, int) or payout <= 0:
                raise ValueError(f"Payout for {key!r} must be a positive integer, got {payout!r}.")
            validated[(match_count, symbol)] = payout
        self._rewards = MappingProxyType(validated)

    def payout(self, match_count, symbol):
        return self._rewards.get((match_count, symbol), 0)

    def items(self):
        return self._rewards.items()

    def payouts(self):
        """Distinct payout amounts, ascending."""
        return sorted(set(self._rewards.values()))

    def __len__(self):
        return len(self._rewards)


DEFAULT_REEL_SET = ReelSet(REELS)
DEFAULT_REWARD_TABLE = RewardTable(REWARDS)


class SymbolSampler:
    """
    Draws one symbol per reel, uniformly over each reel's sequence.

    The random source is injectable: pass a seeded ``random.Random`` (or any
    object with a ``choice`` method) for reproducible runs.
    """

    def __init__(self, reel_set=None, rng=None):
        self.reel_set = reel_set if reel_set is not None else DEFAULT_REEL_SET
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def seeded(cls, seed, reel_set=None):
        return cls(reel_set=reel_set, rng=random.Random(seed))

    def draw(self, reel):
        return self.rng.choice(reel)

    def spin_reels(self):
        return [self.draw(reel) for reel in self.reel_set]


def evaluate_reward(outcome, reward_table=None):
    """
    Resolves a spin outcome to its payout.

    Precedence: three of a kind across reels 0-2 first, then a pair on reels
    0 and 1. A pair on reels 1 and 2 alone never pays.
    """
    table = reward_table if reward_table is not None else DEFAULT_REWARD_TABLE
    first, second, third = outcome[0], outcome[1], outcome[2]
    if first == second:
        if second == third:
            return table.payout(3, first)
        return table.payout(2, first)
    return 0


def reward_probabilities(reel_set=None, reward_table=None):
    """
    Exact probability of every payout a single spin can produce, 0 included.

    Returns:
        dict: payout -> Fraction, ascending by payout. Probabilities sum to 1.
    """
    reels = reel_set if reel_set is not None else DEFAULT_REEL_SET
    table = reward_table if reward_table is not None else DEFAULT_REWARD_TABLE

    probabilities = []
    for reel in reels:
        counts = Counter(reel)
        probabilities.append({symbol: Fraction(count, len(reel)) for symbol, count in counts.items()})
    p0, p1, p2 = probabilities

    distribution = {}
    for symbol, p_first in p0.items():
        p_pair = p_first * p1.get(symbol, 0)
        if not p_pair:
            continue
        p_third = p2.get(symbol, 0)
        for payout, p in ((table.payout(3, symbol), p_pair * p_third),
                          (table.payout(2, symbol), p_pair * (1 - p_third))):
            if payout and p:
                distribution[payout] = distribution.get(payout, 0) + p

    distribution[0] = 1 - sum(distribution.values(), Fraction(0))
    return dict(sorted(distribution.items()))


def expected_reward_per_spin(reel_set=None, reward_table=None):
    """
    Exact expected payout of a single spin, derived from reel symbol frequencies.

    Returns a Fraction so callers can decide how to round.
    """
    distribution = reward_probabilities(reel_set, reward_table)
    return sum((payout * p for payout, p in distribution.items()), Fraction(0))
