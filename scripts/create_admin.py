"""
Create (or reset the password of) an admin account
Usage: python scripts/create_admin.py <username> <password>
"""

import sys

from membership import create_app, db
from membership.models import User

app = create_app()


def create_admin(username, password):
    """Create the admin, or update the password if the username exists"""
    with app.app_context():
        username = username.strip().lower()
        if len(password) < 8:
            print("[ERROR] Password must be at least 8 characters long")
            return False

        user = User.query.filter_by(username=username).first()
        if user:
            print(f"User {username} already exists, updating password...")
        else:
            user = User(username=username, role="admin")
            db.session.add(user)

        user.role = "admin"
        user.set_password(password)
        db.session.commit()
        print(f"[OK] Admin account ready: {username}")
        return True


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__.strip())
        sys.exit(1)
    sys.exit(0 if create_admin(sys.argv[1], sys.argv[2]) else 1)
