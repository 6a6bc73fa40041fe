import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for
from jose import JWTError, jwt

from extensions import db
from forms import LoginForm
from models import User

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

TOKEN_SESSION_KEY = 'access_token'


class AuthError(Exception):
    """Raised when credentials or an access token are not acceptable."""


def hash_password(password):
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def check_password(password, password_hash):
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class AuthSession:
    """Proof of a signed-in user, handed to the data-access layer."""
    def __init__(self, user_id, email, token, expires_at=None):
        self.user_id = user_id
        self.email = email
        self.token = token
        self.expires_at = expires_at

    def __repr__(self):
        return f'<AuthSession {self.email}>'


class IdentityProvider:
    """Signs users in against the users table and issues signed access tokens."""

    def __init__(self, secret_key, token_ttl=3600, algorithm='HS256'):
        self.secret_key = secret_key
        self.token_ttl = token_ttl
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config):
        return cls(
            secret_key=config['SECRET_KEY'],
            token_ttl=config.get('AUTH_TOKEN_TTL', 3600),
            algorithm=config.get('AUTH_TOKEN_ALGORITHM', 'HS256'),
        )

    def sign_in(self, email, password):
        email = (email or '').strip().lower()
        user = User.query.filter(db.func.lower(User.email) == email).first()
        if not user or not check_password(password, user.password_hash):
            logger.info("Failed sign-in for %s", email)
            raise AuthError('Invalid login credentials')
        if not user.is_active:
            logger.info("Sign-in refused for inactive account %s", email)
            raise AuthError('Account is disabled. Please contact support.')

        user.last_login_at = datetime.utcnow()
        db.session.commit()
        return self.issue(user)

    def issue(self, user):
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=self.token_ttl)
        claims = {
            'sub': str(user.id),
            'email': user.email,
            'iat': now,
            'exp': expires_at,
        }
        token = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return AuthSession(user.id, user.email, token, expires_at)

    def verify(self, token):
        if not token:
            raise AuthError('Not signed in')
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthError(f'Session is no longer valid: {e}') from e
        try:
            user_id = int(claims['sub'])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError('Session is no longer valid') from e
        expires_at = datetime.fromtimestamp(claims['exp'], tz=timezone.utc) if 'exp' in claims else None
        return AuthSession(user_id, claims.get('email'), token, expires_at)

    def sign_out(self, auth_session):
        if auth_session is not None:
            logger.info("Signed out %s", auth_session.email)


def get_identity_provider():
    return IdentityProvider.from_config(current_app.config)


def current_auth():
    """AuthSession for the token held in the Flask session, or None"""
    token = session.get(TOKEN_SESSION_KEY)
    if not token:
        return None
    try:
        return get_identity_provider().verify(token)
    except AuthError:
        return None


# Authentication decorator
def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if TOKEN_SESSION_KEY not in session:
            return redirect(url_for('auth.login'))

        if current_auth() is None:
            session.clear()
            flash('Your session has expired. Please log in again.', 'error')
            return redirect(url_for('auth.login'))

        return f(*args, **kwargs)
    return decorated_function


# Authentication routes
@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    # Strip credentials that ended up in the query string by redirecting to a clean URL
    if request.method == 'GET' and 'password' in request.args:
        return redirect(url_for('auth.login'))

    form = LoginForm()
    error_message = None
    if form.validate_on_submit():
        try:
            auth_session = get_identity_provider().sign_in(form.email.data, form.password.data)
        except AuthError as e:
            error_message = str(e)
        else:
            session.clear()
            session.permanent = True
            session[TOKEN_SESSION_KEY] = auth_session.token
            session['email'] = auth_session.email
            logger.info("Signed in %s", auth_session.email)
            return redirect(url_for('dashboard.index'))

    return render_template('login.html', form=form, error_message=error_message)


@auth_bp.route('/logout')
def logout():
    get_identity_provider().sign_out(current_auth())
    session.clear()
    flash('You have been logged out successfully!', 'info')
    return redirect(url_for('auth.login'))
