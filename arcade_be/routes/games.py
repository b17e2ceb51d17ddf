from http import HTTPStatus

from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from ..schemas import GamesQuerySchema, GamesPageSchema
from ..exceptions import ValidationException

games_bp = Blueprint('games', __name__, url_prefix='/api/games')


def _query_games(raw_params):
    try:
        params = GamesQuerySchema().load(raw_params)
    except ValidationError as e:
        raise ValidationException(status_message="Input validation failed.", details=e.messages)

    page = params['page'] if params['page'] is not None else current_app.config['DEFAULT_PAGE']
    limit = params['limit'] if params['limit'] is not None else current_app.config['DEFAULT_PAGE_LIMIT']

    result = current_app.extensions['games_catalog'].get_games(params['search'], page, limit)
    return jsonify({'status': True, **GamesPageSchema().dump(result)}), HTTPStatus.OK


@games_bp.route('', methods=['GET'])
@games_bp.route('/', methods=['GET'])
def get_all_games():
    return _query_games(request.args.to_dict())


@games_bp.route('/search', methods=['POST'])
def search_games():
    json_data = request.get_json(silent=True)
    if json_data is None:
        json_data = {}
    if not isinstance(json_data, dict):
        raise ValidationException(status_message="Search body must be a JSON object.")
    return _query_games(json_data)
