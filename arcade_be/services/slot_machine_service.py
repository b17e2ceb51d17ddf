"""
Slot Machine Service
Owns the persistent player balance and runs live spins against it
"""

import logging
import threading

from ..exceptions import InsufficientFundsException
from ..utils.slot_helper import (
    SPIN_COST,
    INITIAL_BALANCE,
    SymbolSampler,
    evaluate_reward,
    DEFAULT_REWARD_TABLE,
)

logger = logging.getLogger(__name__)

RESET_ACTION_BUTTON = {'text': 'Reset balance', 'actionType': 'RESET_BALANCE', 'actionPayload': '/api/slot/reset'}


class SlotMachineService:
    """Serializes spin() and reset_balance() on a single account balance"""

    def __init__(self, initial_balance=INITIAL_BALANCE, sampler=None, reward_table=None):
        self.initial_balance = initial_balance
        self.sampler = sampler if sampler is not None else SymbolSampler()
        self.reward_table = reward_table if reward_table is not None else DEFAULT_REWARD_TABLE
        self._balance = initial_balance
        self._lock = threading.Lock()

    def init_app(self, app):
        """Pick up INITIAL_BALANCE from the app config and register on the app"""
        with self._lock:
            self.initial_balance = app.config.get('INITIAL_BALANCE', INITIAL_BALANCE)
            self._balance = self.initial_balance
        app.extensions['slot_machine'] = self
        logger.info(f"Slot machine initialized with starting balance {self.initial_balance}")

    @property
    def balance(self):
        with self._lock:
            return self._balance

    def spin(self):
        """
        Deducts the spin cost, draws an outcome and credits its reward.

        Returns:
            dict: ``outcome``, ``reward`` and the post-spin ``balance``.

        Raises:
            InsufficientFundsException: If the balance is zero or below. The balance is left untouched.
        """
        with self._lock:
            if self._balance <= 0:
                raise InsufficientFundsException(
                    status_message='Insufficient balance to spin!',
                    details={'balance': self._balance, 'spin_cost': SPIN_COST},
                    action_button=RESET_ACTION_BUTTON
                )
            outcome = self.sampler.spin_reels()
            reward = evaluate_reward(outcome, self.reward_table)
            # Balance only moves once the outcome is fully resolved
            self._balance += reward - SPIN_COST
            balance = self._balance

        logger.debug(f"Spin {outcome} paid {reward}, balance now {balance}")
        return {'outcome': outcome, 'reward': reward, 'balance': balance}

    def reset_balance(self):
        with self._lock:
            self._balance = self.initial_balance
            balance = self._balance
        logger.info(f"Slot machine balance reset to {balance}")
        return {'balance': balance}
