import unittest
from fractions import Fraction
from itertools import cycle

from arcade_be.exceptions import InvalidArgumentException
from arcade_be.error_codes import ErrorCodes
from arcade_be.utils.slot_helper import SymbolSampler, REWARDS, expected_reward_per_spin
from arcade_be.utils.slot_simulator import (
    simulate_spins,
    monte_carlo_simulation,
    MonteCarloSimulator,
    exact_session_statistics,
)

LOSING_SPIN = ["apple", "cherry", "cherry"]     # pays 0
CHERRY_TRIPLE = ["cherry", "cherry", "cherry"]  # pays 50
LEMON_TRIPLE = ["lemon", "lemon", "lemon"]      # pays 3


def scripted_sampler(*outcomes):
    """Sampler whose spins replay the given outcomes in order, looping."""
    symbols = cycle([symbol for outcome in outcomes for symbol in outcome])

    class _Rng:
        def choice(self, reel):
            return next(symbols)

    return SymbolSampler(rng=_Rng())


class TestSimulateSpins(unittest.TestCase):

    def test_every_spin_losing_stops_at_zero(self):
        result = simulate_spins(10, 3, sampler=scripted_sampler(LOSING_SPIN))
        self.assertEqual(len(result['spins']), 3)
        self.assertEqual([s['balance_after'] for s in result['spins']], [2, 1, 0])
        self.assertEqual(result['final_balance'], 0)

    def test_records_are_in_play_order(self):
        result = simulate_spins(3, 20, sampler=scripted_sampler(CHERRY_TRIPLE, LOSING_SPIN, LEMON_TRIPLE))
        spins = result['spins']
        self.assertEqual([s['spin_index'] for s in spins], [1, 2, 3])
        self.assertEqual(spins[0]['outcome'], CHERRY_TRIPLE)
        self.assertEqual([s['reward'] for s in spins], [50, 0, 3])
        self.assertEqual([s['balance_after'] for s in spins], [69, 68, 70])
        self.assertEqual(result['final_balance'], 70)

    def test_balance_arithmetic_holds_for_each_spin(self):
        result = simulate_spins(500, 20, sampler=SymbolSampler.seeded(3))
        previous = 20
        for spin in result['spins']:
            self.assertEqual(spin['balance_after'], previous - 1 + spin['reward'])
            previous = spin['balance_after']
        self.assertEqual(result['final_balance'], previous)

    def test_length_bounded_and_short_runs_end_broke(self):
        for seed in range(30):
            result = simulate_spins(40, 2, sampler=SymbolSampler.seeded(seed))
            spins = result['spins']
            self.assertGreaterEqual(len(spins), 1)
            self.assertLessEqual(len(spins), 40)
            if len(spins) < 40:
                self.assertLessEqual(spins[-1]['balance_after'], 0)
            # No spin before the last one left the balance at or below zero
            for spin in spins[:-1]:
                self.assertGreater(spin['balance_after'], 0)

    def test_seeded_runs_are_reproducible(self):
        first = simulate_spins(50, 20, sampler=SymbolSampler.seeded(42))
        second = simulate_spins(50, 20, sampler=SymbolSampler.seeded(42))
        self.assertEqual(first, second)

    def test_rewards_come_from_the_table(self):
        allowed = {0} | set(REWARDS.values())
        result = simulate_spins(300, 50, sampler=SymbolSampler.seeded(11))
        for spin in result['spins']:
            self.assertIn(spin['reward'], allowed)

    def test_invalid_arguments(self):
        for bad in (0, -1, 1.5, 2.0, True, None, "10"):
            with self.assertRaises(InvalidArgumentException):
                simulate_spins(bad, 20)
            with self.assertRaises(InvalidArgumentException):
                simulate_spins(10, bad)

    def test_invalid_argument_names_the_field(self):
        with self.assertRaises(InvalidArgumentException) as ctx:
            simulate_spins(10, 0)
        self.assertEqual(ctx.exception.error_code, ErrorCodes.INVALID_ARGUMENT)
        self.assertEqual(ctx.exception.details['field'], 'startingBalance')


class TestMonteCarloSimulation(unittest.TestCase):

    def test_bankruptcy_requires_remaining_budget(self):
        # Balance reaches zero on the only budgeted spin: not a bankruptcy
        summary = monte_carlo_simulation(5, 1, 1, sampler=scripted_sampler(LOSING_SPIN))
        self.assertEqual(summary['bankruptcies'], 0)
        self.assertEqual(summary['bankruptcy_rate'], 0.0)
        self.assertEqual(summary['average_spins_per_trial'], 1.0)

        # Same spin with budget left over: every trial is a bankruptcy
        summary = monte_carlo_simulation(5, 2, 1, sampler=scripted_sampler(LOSING_SPIN))
        self.assertEqual(summary['bankruptcies'], 5)
        self.assertEqual(summary['bankruptcy_rate'], 100.0)
        self.assertEqual(summary['average_spins_per_trial'], 1.0)
        self.assertEqual(summary['reward_distribution'], {})
        self.assertEqual(summary['average_reward_per_spin'], 0.0)

    def test_distribution_counts_only_paying_spins(self):
        summary = monte_carlo_simulation(
            2, 4, 100,
            sampler=scripted_sampler(CHERRY_TRIPLE, LOSING_SPIN, LEMON_TRIPLE, LOSING_SPIN)
        )
        self.assertEqual(summary['reward_distribution'], {3: 2, 50: 2})
        self.assertEqual(summary['total_reward'], 106)
        self.assertEqual(summary['total_spins_executed'], 8)
        self.assertEqual(summary['average_reward_per_spin'], 13.25)
        self.assertEqual(summary['average_spins_per_trial'], 4.0)
        self.assertEqual(summary['total_trials'], 2)

    def test_distribution_keys_sorted(self):
        summary = monte_carlo_simulation(50, 50, 20, sampler=SymbolSampler.seeded(5))
        keys = list(summary['reward_distribution'].keys())
        self.assertEqual(keys, sorted(keys))
        self.assertTrue(all(k > 0 for k in keys))

    def test_summary_bounds(self):
        summary = monte_carlo_simulation(300, 60, 5, sampler=SymbolSampler.seeded(8))
        self.assertEqual(summary['total_trials'], 300)
        self.assertGreaterEqual(summary['bankruptcy_rate'], 0)
        self.assertLessEqual(summary['bankruptcy_rate'], 100)
        self.assertGreaterEqual(summary['average_spins_per_trial'], 1)
        self.assertLessEqual(summary['average_spins_per_trial'], 60)
        self.assertGreaterEqual(summary['average_reward_per_spin'], 0)
        self.assertEqual(sum(summary['reward_distribution'].values()) <= summary['total_spins_executed'], True)

    def test_seeded_runs_are_reproducible(self):
        first = monte_carlo_simulation(100, 30, 20, sampler=SymbolSampler.seeded(2024))
        second = monte_carlo_simulation(100, 30, 20, sampler=SymbolSampler.seeded(2024))
        self.assertEqual(first, second)

    def test_average_reward_converges_to_expectation(self):
        summary = monte_carlo_simulation(200, 1000, 20, sampler=SymbolSampler.seeded(12345))
        expected = float(expected_reward_per_spin())
        self.assertAlmostEqual(summary['average_reward_per_spin'], expected, delta=0.05)

    def test_simulator_keeps_counters_after_run(self):
        simulator = MonteCarloSimulator(3, 2, 1, sampler=scripted_sampler(LOSING_SPIN))
        summary = simulator.run()
        self.assertEqual(simulator.bankruptcies, 3)
        self.assertEqual(simulator.total_spins_executed, 3)
        self.assertEqual(summary, simulator.summary())

    def test_invalid_arguments(self):
        for bad in (0, -3, 2.5, False, None):
            with self.assertRaises(InvalidArgumentException):
                monte_carlo_simulation(bad, 10, 20)
            with self.assertRaises(InvalidArgumentException):
                monte_carlo_simulation(10, bad, 20)
            with self.assertRaises(InvalidArgumentException):
                monte_carlo_simulation(10, 10, bad)


class TestExactSessionStatistics(unittest.TestCase):

    def test_single_spin_budget_never_goes_bankrupt(self):
        stats = exact_session_statistics(1, 1)
        self.assertEqual(stats['bankruptcy_probability'], 0)
        self.assertEqual(stats['expected_spins'], 1)

    def test_one_coin_two_spins(self):
        # 104 of 512 equally likely outcomes pay something; the rest empty a one-coin balance
        stats = exact_session_statistics(2, 1)
        self.assertEqual(stats['bankruptcy_probability'], Fraction(408, 512))
        self.assertEqual(stats['expected_spins'], 1 + Fraction(104, 512))

    def test_balance_too_deep_to_lose(self):
        stats = exact_session_statistics(10, 11)
        self.assertEqual(stats['bankruptcy_probability'], 0)
        self.assertEqual(stats['expected_spins'], 10)

    def test_invalid_arguments(self):
        with self.assertRaises(InvalidArgumentException):
            exact_session_statistics(0, 20)
        with self.assertRaises(InvalidArgumentException):
            exact_session_statistics(50, -1)


class TestReferenceScenario(unittest.TestCase):
    """Seeded 50-spin sessions from a 20-coin balance, checked against the exact figures."""

    NUM_TRIALS = 20_000
    NUM_SPINS = 50
    STARTING_BALANCE = 20

    @classmethod
    def setUpClass(cls):
        cls.exact = exact_session_statistics(cls.NUM_SPINS, cls.STARTING_BALANCE)
        cls.summary = monte_carlo_simulation(
            cls.NUM_TRIALS, cls.NUM_SPINS, cls.STARTING_BALANCE,
            sampler=SymbolSampler.seeded(20240501)
        )

    def test_exact_reference_figures(self):
        bankruptcy_rate = float(self.exact['bankruptcy_probability']) * 100
        self.assertGreater(bankruptcy_rate, 14.5)
        self.assertLess(bankruptcy_rate, 16.5)
        self.assertAlmostEqual(float(self.exact['expected_spins']), 47.35, delta=0.2)

    def test_bankruptcy_rate_matches_exact_value(self):
        expected_rate = float(self.exact['bankruptcy_probability']) * 100
        # Standard error at 20k trials is about 0.26 points
        self.assertAlmostEqual(self.summary['bankruptcy_rate'], expected_rate, delta=1.3)

    def test_average_spins_matches_exact_value(self):
        self.assertAlmostEqual(
            self.summary['average_spins_per_trial'], float(self.exact['expected_spins']), delta=0.4
        )

    def test_average_reward_matches_expectation(self):
        self.assertAlmostEqual(
            self.summary['average_reward_per_spin'], float(expected_reward_per_spin()), delta=0.03
        )

    def test_counters_consistent(self):
        self.assertEqual(self.summary['total_trials'], self.NUM_TRIALS)
        self.assertLessEqual(self.summary['total_spins_executed'], self.NUM_TRIALS * self.NUM_SPINS)
        self.assertLessEqual(sum(self.summary['reward_distribution'].values()), self.summary['total_spins_executed'])
        self.assertEqual(
            self.summary['bankruptcy_rate'], round(self.summary['bankruptcies'] / self.NUM_TRIALS * 100, 2)
        )


if __name__ == '__main__':
    unittest.main()
