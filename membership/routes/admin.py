from flask import request, Response
from flask_login import login_user, logout_user, login_required, current_user
from membership.routes import admin_bp
from membership.models import User
from membership.errors import MembershipError, PermissionDenied, ValidationError
from membership.responses import to_envelope
from membership import review
from datetime import datetime


def admin_required(f):
    """Decorator to require admin role"""
    from functools import wraps
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or current_user.role != 'admin':
            raise PermissionDenied()
        return f(*args, **kwargs)
    return decorated_function


@admin_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or request.form
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    username = (data.get('username') or '').strip().lower()
    password = data.get('password') or ''

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        return to_envelope(MembershipError('Invalid username or password.'), status=401)

    login_user(user)
    return to_envelope({'username': user.username, 'role': user.role}, 'Logged in successfully')


@admin_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return to_envelope(None, 'You have been logged out.')


@admin_bp.route('/dashboard/stats')
@login_required
@admin_required
def dashboard_stats():
    return to_envelope(review.dashboard_stats())


@admin_bp.route('/dashboard/recent-members')
@login_required
@admin_required
def recent_members():
    return to_envelope(review.recent_members())


@admin_bp.route('/members/export')
@login_required
@admin_required
def export_members():
    return Response(
        review.export_csv(),
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename=members_export_{datetime.now().strftime("%Y%m%d_%H%M%S")}.csv'
        }
    )
