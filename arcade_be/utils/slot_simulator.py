# arcade_be/utils/slot_simulator.py
"""
Scripted session runs and Monte Carlo analysis of the slot machine payout system.

Both simulators work on a local balance only; nothing here touches the
persistent account held by the spin service.
"""
import math
from fractions import Fraction
from functools import reduce

from arcade_be.utils.slot_helper import (
    SPIN_COST,
    reward_probabilities,
    SymbolSampler,
    evaluate_reward,
    DEFAULT_REWARD_TABLE,
)
from arcade_be.utils.validators import validate_positive_int


def simulate_spins(num_spins, starting_balance, sampler=None, reward_table=None):
    """
    Plays up to ``num_spins`` spins against a local balance starting at ``starting_balance``.

    Each spin deducts the spin cost, draws an outcome, and credits its reward.
    The run stops right after the first spin that leaves the balance at or
    below zero, so the returned list may be shorter than ``num_spins``.

    Returns:
        dict: ``final_balance`` and ``spins``, a list of
        ``{spin_index, outcome, reward, balance_after}`` records in play order.

    Raises:
        InvalidArgumentException: If either argument is not a positive integer.
    """
    validate_positive_int(num_spins, 'numSpins')
    validate_positive_int(starting_balance, 'startingBalance')

    sampler = sampler if sampler is not None else SymbolSampler()
    table = reward_table if reward_table is not None else DEFAULT_REWARD_TABLE

    balance = starting_balance
    spins = []
    for spin_index in range(1, num_spins + 1):
        balance -= SPIN_COST
        outcome = sampler.spin_reels()
        reward = evaluate_reward(outcome, table)
        balance += reward
        spins.append({
            'spin_index': spin_index,
            'outcome': outcome,
            'reward': reward,
            'balance_after': balance,
        })
        if balance <= 0:
            break

    return {'final_balance': balance, 'spins': spins}


class MonteCarloSimulator:
    """
    Runs many independent trials and keeps aggregate counters only.

    A trial plays until its spin budget is spent or its balance drops to zero
    or below. A trial that runs dry while budget remains counts as a bankruptcy;
    one that hits zero on its very last budgeted spin does not.
    """

    def __init__(self, num_trials, num_spins, starting_balance, sampler=None, reward_table=None):
        self.num_trials = validate_positive_int(num_trials, 'numTrials')
        self.num_spins = validate_positive_int(num_spins, 'numSpins')
        self.starting_balance = validate_positive_int(starting_balance, 'startingBalance')
        self.sampler = sampler if sampler is not None else SymbolSampler()
        self.reward_table = reward_table if reward_table is not None else DEFAULT_REWARD_TABLE

        # Statistics collected by run()
        self.total_reward = 0
        self.total_spins_executed = 0
        self.bankruptcies = 0
        self.reward_distribution = {}

        # Derived statistics
        self.average_reward_per_spin = 0.0
        self.average_spins_per_trial = 0.0
        self.bankruptcy_rate = 0.0

    def run(self):
        # Counters live in locals for the hot loop and are stored once at the end.
        num_spins = self.num_spins
        starting_balance = self.starting_balance
        spin_reels = self.sampler.spin_reels
        table = self.reward_table
        distribution = {}
        total_reward = 0
        total_spins = 0
        bankruptcies = 0

        for _ in range(self.num_trials):
            balance = starting_balance
            spins = 0
            while spins < num_spins:
                spins += 1
                reward = evaluate_reward(spin_reels(), table)
                balance += reward - SPIN_COST
                if reward > 0:
                    total_reward += reward
                    distribution[reward] = distribution.get(reward, 0) + 1
                if balance <= 0:
                    if spins < num_spins:
                        bankruptcies += 1
                    break
            total_spins += spins

        self.total_reward = total_reward
        self.total_spins_executed = total_spins
        self.bankruptcies = bankruptcies
        self.reward_distribution = dict(sorted(distribution.items()))
        self.calculate_derived_statistics()
        return self.summary()

    def calculate_derived_statistics(self):
        # Every trial plays at least one spin, so total_spins_executed > 0 after run().
        if self.total_spins_executed:
            self.average_reward_per_spin = round(self.total_reward / self.total_spins_executed, 2)
        self.average_spins_per_trial = round(self.total_spins_executed / self.num_trials, 2)
        self.bankruptcy_rate = round(self.bankruptcies / self.num_trials * 100, 2)

    def summary(self):
        return {
            'total_trials': self.num_trials,
            'average_reward_per_spin': self.average_reward_per_spin,
            'average_spins_per_trial': self.average_spins_per_trial,
            'bankruptcy_rate': self.bankruptcy_rate,
            'reward_distribution': dict(self.reward_distribution),
            'total_reward': self.total_reward,
            'total_spins_executed': self.total_spins_executed,
            'bankruptcies': self.bankruptcies,
        }


def monte_carlo_simulation(num_trials, num_spins, starting_balance, sampler=None, reward_table=None):
    """
    Runs ``num_trials`` independent trials of up to ``num_spins`` spins each.

    Returns the summary produced by MonteCarloSimulator.summary(): rounded
    averages, the bankruptcy rate as a percentage, the reward histogram
    (zero rewards excluded), and the raw counters behind them.

    Raises:
        InvalidArgumentException: If any argument is not a positive integer.
    """
    simulator = MonteCarloSimulator(
        num_trials, num_spins, starting_balance,
        sampler=sampler, reward_table=reward_table
    )
    return simulator.run()


def exact_session_statistics(num_spins, starting_balance, reel_set=None, reward_table=None):
    """
    Exact counterpart of a Monte Carlo run for one session shape.

    Propagates the balance distribution spin by spin using the exact payout
    probabilities, with the same stopping and bankruptcy rules as
    MonteCarloSimulator.

    Returns:
        dict: ``bankruptcy_probability`` and ``expected_spins``, both Fractions.

    Raises:
        InvalidArgumentException: If either argument is not a positive integer.
    """
    validate_positive_int(num_spins, 'numSpins')
    validate_positive_int(starting_balance, 'startingBalance')

    distribution = reward_probabilities(reel_set, reward_table)
    denominator = reduce(math.lcm, (p.denominator for p in distribution.values()), 1)
    weights = {payout - SPIN_COST: int(p * denominator) for payout, p in distribution.items() if p}

    # Masses stay integers, measured in units of 1 / denominator ** spins_played
    alive = {starting_balance: 1}
    scale = 1
    bankruptcy_probability = Fraction(0)
    expected_spins = Fraction(0)

    for spin in range(1, num_spins + 1):
        expected_spins += Fraction(sum(alive.values()), scale)
        scale *= denominator
        next_alive = {}
        broke = 0
        for balance, mass in alive.items():
            for delta, weight in weights.items():
                new_balance = balance + delta
                if new_balance <= 0:
                    broke += mass * weight
                else:
                    next_alive[new_balance] = next_alive.get(new_balance, 0) + mass * weight
        if spin < num_spins:
            bankruptcy_probability += Fraction(broke, scale)
        alive = next_alive

    return {
        'bankruptcy_probability': bankruptcy_probability,
        'expected_spins': expected_spins,
    }
