from flask import Blueprint

members_bp = Blueprint('members', __name__)
admin_bp = Blueprint('admin', __name__)

from membership.routes import admin, members  # noqa: E402,F401
from membership.routes.verification import verification_bp  # noqa: E402,F401
