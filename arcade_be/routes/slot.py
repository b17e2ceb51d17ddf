import time
from http import HTTPStatus

from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from ..extensions import limiter
from ..schemas import (
    SimulateSpinsRequestSchema, MonteCarloRequestSchema,
    SpinResultSchema, BalanceSchema, SimulationResultSchema, MonteCarloResultSchema
)
from ..utils.slot_simulator import simulate_spins, monte_carlo_simulation
from ..exceptions import ValidationException, InvalidArgumentException

slot_bp = Blueprint('slot', __name__, url_prefix='/api/slot')


def _slot_machine():
    return current_app.extensions['slot_machine']


def _load_request(schema):
    json_data = request.get_json(silent=True)
    if json_data is None:
        raise ValidationException(status_message="Invalid JSON payload.")
    try:
        return schema.load(json_data)
    except ValidationError as e:
        raise ValidationException(status_message="Input validation failed.", details=e.messages)


@slot_bp.route('/spin', methods=['POST'])
@limiter.limit(lambda: current_app.config['SPIN_RATE_LIMIT'])
def spin():
    # InsufficientFundsException propagates to the global handler
    result = _slot_machine().spin()
    return jsonify({'status': True, **SpinResultSchema().dump(result)}), HTTPStatus.OK


@slot_bp.route('/reset', methods=['POST'])
def reset_balance():
    result = _slot_machine().reset_balance()
    return jsonify({'status': True, **BalanceSchema().dump(result)}), HTTPStatus.OK


@slot_bp.route('/simulate', methods=['POST'])
@limiter.limit(lambda: current_app.config['SIMULATION_RATE_LIMIT'])
def simulate():
    loaded_data = _load_request(SimulateSpinsRequestSchema())
    num_spins = loaded_data['num_spins']
    starting_balance = loaded_data['starting_balance']

    max_batch_spins = current_app.config['MAX_BATCH_SPINS']
    if num_spins > max_batch_spins:
        raise InvalidArgumentException(
            status_message=f"numSpins may not exceed {max_batch_spins}.",
            details={'field': 'numSpins', 'max': max_batch_spins}
        )

    result = simulate_spins(num_spins, starting_balance)
    current_app.logger.info(
        f"Batch simulation of {num_spins} spins from balance {starting_balance}: "
        f"{len(result['spins'])} played, final balance {result['final_balance']}"
    )
    return jsonify({
        'status': True,
        'status_message': 'Simulation completed successfully.',
        'data': SimulationResultSchema().dump(result)
    }), HTTPStatus.OK


@slot_bp.route('/monte-carlo', methods=['POST'])
@limiter.limit(lambda: current_app.config['SIMULATION_RATE_LIMIT'])
def run_monte_carlo():
    loaded_data = _load_request(MonteCarloRequestSchema())
    num_trials = loaded_data['num_trials']
    num_spins = loaded_data['num_spins']
    starting_balance = loaded_data['starting_balance']

    max_simulation_spins = current_app.config['MAX_SIMULATION_SPINS']
    if num_trials * num_spins > max_simulation_spins:
        raise InvalidArgumentException(
            status_message=f"numTrials * numSpins may not exceed {max_simulation_spins}.",
            details={'fields': ['numTrials', 'numSpins'], 'max': max_simulation_spins}
        )

    started = time.perf_counter()
    result = monte_carlo_simulation(num_trials, num_spins, starting_balance)
    elapsed = time.perf_counter() - started
    current_app.logger.info(
        f"Monte Carlo simulation {num_trials}x{num_spins} from balance {starting_balance} "
        f"finished in {elapsed:.2f}s: bankruptcy rate {result['bankruptcy_rate']}%"
    )
    return jsonify({'status': True, 'data': MonteCarloResultSchema().dump(result)}), HTTPStatus.OK
