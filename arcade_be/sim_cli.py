#!/usr/bin/env python3
"""
Slot Machine Simulation CLI Tool

A command-line interface for exercising the slot machine engine offline:
- Scripted session runs with a per-spin log
- Monte Carlo analysis of the payout system
- The exact expected payout of a single spin and the exact session outlook

Usage:
    python -m arcade_be.sim_cli --help
    python -m arcade_be.sim_cli simulate --num-spins 50 --starting-balance 20
    python -m arcade_be.sim_cli monte-carlo --num-trials 100000 --num-spins 50 --seed 42
    python -m arcade_be.sim_cli expected
"""

import sys
import click

from arcade_be.exceptions import AppException
from arcade_be.utils.slot_helper import (
    SPIN_COST,
    INITIAL_BALANCE,
    SymbolSampler,
    expected_reward_per_spin,
)
from arcade_be.utils.slot_simulator import simulate_spins, monte_carlo_simulation, exact_session_statistics


def build_sampler(seed):
    return SymbolSampler.seeded(seed) if seed is not None else SymbolSampler()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, verbose):
    """Slot Machine Simulation CLI - offline tools for the payout system."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command()
@click.option('--num-spins', default=50, show_default=True, type=int, help='Spins to play')
@click.option('--starting-balance', default=INITIAL_BALANCE, show_default=True, type=int, help='Coins to start with')
@click.option('--seed', type=int, help='Seed for a reproducible run')
@click.pass_context
def simulate(ctx, num_spins, starting_balance, seed):
    """Play a session and print every spin."""
    try:
        result = simulate_spins(num_spins, starting_balance, sampler=build_sampler(seed))
    except AppException as e:
        click.echo(f"❌ Error: {e.status_message}", err=True)
        sys.exit(1)

    click.echo("--- Slot Machine Simulation Start ---\n")
    for spin in result['spins']:
        click.echo(f"Spin #{spin['spin_index']}:")
        click.echo(f"Result: {' | '.join(spin['outcome'])}")
        click.echo(f"Reward: {spin['reward']} coins")
        click.echo(f"Balance: {spin['balance_after']} coins\n")

    if len(result['spins']) < num_spins:
        click.echo("Balance exhausted. Simulation stopped.\n")

    click.echo("--- Slot Machine Simulation End ---")
    click.echo(f"Final Balance: {result['final_balance']} coins")
    if ctx.obj['verbose']:
        click.echo(f"Spins played: {len(result['spins'])} of {num_spins}")


@cli.command('monte-carlo')
@click.option('--num-trials', default=100_000, show_default=True, type=int, help='Independent sessions to run')
@click.option('--num-spins', default=50, show_default=True, type=int, help='Spin budget per session')
@click.option('--starting-balance', default=INITIAL_BALANCE, show_default=True, type=int, help='Coins each session starts with')
@click.option('--seed', type=int, help='Seed for a reproducible run')
@click.pass_context
def monte_carlo(ctx, num_trials, num_spins, starting_balance, seed):
    """Run a Monte Carlo analysis and print the summary."""
    try:
        summary = monte_carlo_simulation(num_trials, num_spins, starting_balance, sampler=build_sampler(seed))
    except AppException as e:
        click.echo(f"❌ Error: {e.status_message}", err=True)
        sys.exit(1)

    click.echo("\n🎰 Monte Carlo Simulation Results")
    click.echo("=" * 40)
    click.echo(f"Total Trials: {summary['total_trials']:,}")
    click.echo(f"Average Reward per Spin: {summary['average_reward_per_spin']:.2f} coins")
    click.echo(f"Average Spins per Trial: {summary['average_spins_per_trial']:.2f}")
    click.echo(f"Bankruptcy Rate: {summary['bankruptcy_rate']:.2f}%")
    click.echo("Reward Distribution:")
    for reward, count in summary['reward_distribution'].items():
        click.echo(f"  {reward} coins: {count:,} times")
    click.echo("=" * 40)

    if ctx.obj['verbose']:
        click.echo(f"Total Reward: {summary['total_reward']:,} coins")
        click.echo(f"Total Spins Executed: {summary['total_spins_executed']:,}")
        click.echo(f"Bankruptcies: {summary['bankruptcies']:,}")


@cli.command()
@click.option('--num-spins', default=50, show_default=True, type=int, help='Spin budget per session')
@click.option('--starting-balance', default=INITIAL_BALANCE, show_default=True, type=int, help='Coins each session starts with')
def expected(num_spins, starting_balance):
    """Print the exact expected payout of one spin and the exact session outlook."""
    try:
        session = exact_session_statistics(num_spins, starting_balance)
    except AppException as e:
        click.echo(f"❌ Error: {e.status_message}", err=True)
        sys.exit(1)

    expectation = expected_reward_per_spin()
    click.echo(f"Expected reward per spin: {float(expectation):.8f} coins ({expectation})")
    click.echo(f"Expected net per spin: {float(expectation - SPIN_COST):+.8f} coins")
    click.echo(f"Bankruptcy probability ({num_spins} spins from {starting_balance} coins): "
               f"{float(session['bankruptcy_probability']) * 100:.2f}%")
    click.echo(f"Expected spins per session: {float(session['expected_spins']):.2f}")


if __name__ == '__main__':
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n\n👋 Simulation CLI interrupted by user")
        sys.exit(0)
