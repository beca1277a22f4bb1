from flask import Blueprint, current_app, g, request, jsonify
from authority import db
from authority.auth import bearer_required, issue_token
from authority.models import User
from authority.services.scoring import apply_increment, parse_increment, rank_of, ranked_leaderboard

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Spinboard scoring service!'})

@main.route('/users/add', methods=['POST'])
def add_user():
    data = request.get_json(silent=True)
    if not data or not 'username' in data or not 'password' in data:
        return jsonify({'error': 'Missing username or password'}), 400

    if User.query.filter_by(username=data['username']).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=data['username'], score=0)
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()

    return jsonify({'message': 'User created successfully'}), 201

@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        current_app.logger.info(f"[login] user={user.username}")
        return jsonify({'token': issue_token(user)})
    return jsonify({'error': 'Invalid username or password'}), 401

@main.route('/leaderboard')
def leaderboard():
    return jsonify(ranked_leaderboard())

@main.route('/user-rank')
@bearer_required
def user_rank():
    return jsonify({'rank': rank_of(g.user)})

@main.route('/increment-score', methods=['POST'])
@bearer_required
def increment_score():
    data = request.get_json(silent=True) or {}
    try:
        increment = parse_increment(data.get('increment'))
    except (TypeError, ValueError):
        return jsonify({'error': 'increment must be a wheel label'}), 400
    payload = apply_increment(g.user, increment)
    current_app.logger.info(f"[increment] user={g.user.username} by={increment} seq={payload['seq']}")
    return jsonify(payload)
