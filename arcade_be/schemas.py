from marshmallow import Schema, fields, validate, EXCLUDE
from marshmallow.validate import Range, Length

# --- Game Catalog Schemas ---

class GameSchema(Schema):
    """Public shape of a catalog entry. providerName and any other source keys are never dumped."""
    id = fields.String(allow_none=True)
    slug = fields.String(allow_none=True)
    title = fields.String(allow_none=True)
    thumb = fields.Method('get_thumb_url')
    start_url = fields.String(attribute='startUrl', data_key='startUrl', allow_none=True)

    def get_thumb_url(self, game):
        thumb = game.get('thumb') if isinstance(game, dict) else getattr(game, 'thumb', None)
        if isinstance(thumb, dict):
            return thumb.get('url')
        if isinstance(thumb, str):
            return thumb
        return None

class GamesQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default='', validate=Length(max=100))
    # Missing page/limit fall back to the app's configured pagination defaults
    page = fields.Integer(load_default=None, validate=Range(min=1, error="page must be at least 1."))
    limit = fields.Integer(load_default=None, validate=Range(min=1, error="limit must be at least 1."))

class GamesPageSchema(Schema):
    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    paginated_games = fields.List(fields.Dict(), data_key='paginatedGames')

# --- Slot Machine Schemas ---

def _positive_int_field(data_key):
    return fields.Integer(
        required=True,
        strict=True,
        data_key=data_key,
        validate=validate.Range(min=1, error=f"{data_key} must be a positive integer.")
    )

class SimulateSpinsRequestSchema(Schema):
    num_spins = _positive_int_field('numSpins')
    starting_balance = _positive_int_field('startingBalance')

class MonteCarloRequestSchema(Schema):
    num_trials = _positive_int_field('numTrials')
    num_spins = _positive_int_field('numSpins')
    starting_balance = _positive_int_field('startingBalance')

class SpinResultSchema(Schema):
    outcome = fields.List(fields.String(), required=True)
    reward = fields.Integer(required=True)
    balance = fields.Integer(required=True)

class BalanceSchema(Schema):
    balance = fields.Integer(required=True)

class SpinRecordSchema(Schema):
    spin_index = fields.Integer(data_key='spinIndex')
    outcome = fields.List(fields.String())
    reward = fields.Integer()
    balance_after = fields.Integer(data_key='balanceAfter')

class SimulationResultSchema(Schema):
    final_balance = fields.Integer(data_key='finalBalance')
    spins = fields.List(fields.Nested(SpinRecordSchema))

class MonteCarloResultSchema(Schema):
    total_trials = fields.Integer(data_key='totalTrials')
    average_reward_per_spin = fields.Float(data_key='averageRewardPerSpin')
    average_spins_per_trial = fields.Float(data_key='averageSpinsPerTrial')
    bankruptcy_rate = fields.Float(data_key='bankruptcyRate')
    reward_distribution = fields.Dict(keys=fields.Integer(), values=fields.Integer(), data_key='rewardDistribution')
    total_reward = fields.Integer(data_key='totalReward')
    total_spins_executed = fields.Integer(data_key='totalSpinsExecuted')
    bankruptcies = fields.Integer()
