from membership import create_app, db
from membership.models import User
import os

app = create_app()


def init_db():
    """Create the default admin account if no admin exists yet (idempotent)."""
    try:
        if User.query.filter_by(role="admin").first():
            print("Admin user already exists.")
            return

        username = os.environ.get("ADMIN_USERNAME", "admin").strip().lower()
        password = os.environ.get("ADMIN_PASSWORD", "admin123")

        admin_user = User(username=username, role="admin")
        admin_user.set_password(password)
        db.session.add(admin_user)
        db.session.commit()
        print(f"Admin user created: {username}")
        print("IMPORTANT: Please change the default password after first login!")
    except Exception as e:
        db.session.rollback()
        print(f"Database init error (can usually be ignored if already set up): {e}")


# Ensure the admin user exists whenever the app starts (e.g. under Gunicorn)
with app.app_context():
    init_db()


if __name__ == "__main__":
    # Bind to 0.0.0.0 to accept connections from outside the container
    port = int(os.environ.get('PORT', 5051))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('APP_ENV') == 'development')
