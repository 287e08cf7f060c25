# init_db.py
import os

from werkzeug.security import generate_password_hash

from campus_planner.app import create_app
from campus_planner.models import db, User

# --- DEMO ACCOUNT (override through the environment) ---
DEMO_EMAIL = os.environ.get('DEMO_EMAIL', 'student@example.com')
DEMO_PASS = os.environ.get('DEMO_PASSWORD', 'changeme123')
DEMO_USERNAME = os.environ.get('DEMO_USERNAME', 'student')
# --------------------------------------------------------


def init_db(app):
    with app.app_context():
        # This creates the tables if they don't exist
        db.create_all()

        student = User.query.filter_by(email=DEMO_EMAIL).first()
        if not student:
            student = User(email=DEMO_EMAIL)
            db.session.add(student)
            print("Demo student account created.")

        # Always ensure the demo login matches the environment
        student.username = DEMO_USERNAME
        student.password_hash = generate_password_hash(DEMO_PASS)

        db.session.commit()
        print(f"Database ready! Demo login: {DEMO_EMAIL}")
        return student


if __name__ == '__main__':
    init_db(create_app())
