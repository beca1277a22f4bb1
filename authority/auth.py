"""Bearer tokens for the reference authority.

Tokens are itsdangerous signatures over the user id, keyed by the app's
SECRET_KEY. TOKEN_MAX_AGE_SEC of 0 means tokens never expire.
"""
from functools import wraps

from flask import current_app, g, jsonify, request
from itsdangerous import BadSignature, URLSafeTimedSerializer

from authority import db
from authority.models import User

TOKEN_SALT = 'spinboard-auth'


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user: User) -> str:
    return _serializer().dumps({'uid': user.id})


def user_from_token(token: str):
    max_age = int(current_app.config.get('TOKEN_MAX_AGE_SEC', 0)) or None
    try:
        data = _serializer().loads(token, max_age=max_age)
    except BadSignature:
        return None
    return db.session.get(User, data.get('uid'))


def bearer_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        user = user_from_token(token) if scheme == 'Bearer' and token else None
        if user is None:
            return jsonify({'error': 'Invalid or missing credential'}), 401
        g.user = user
        return view(*args, **kwargs)
    return wrapper
