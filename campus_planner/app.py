# app.py
from flask import Flask, request, jsonify, current_app
from flask_login import LoginManager, login_user, login_required, logout_user, current_user
from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy.exc import IntegrityError

from campus_planner import budget, planner
from campus_planner.config import Config
from campus_planner.errors import PlannerError
from campus_planner.models import db, User
from campus_planner.reports import spending_by_category
from campus_planner.store import CycleStore

login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify(error='Please log in first.'), 401


def _form():
    """Accepts both JSON bodies and classic form posts."""
    return request.get_json(silent=True) or request.form


def _store():
    return CycleStore(db.session, archive_on_reset=current_app.config['ARCHIVE_ON_RESET'])


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    @app.errorhandler(PlannerError)
    def handle_planner_error(exc):
        if exc.status_code >= 500:
            app.logger.error('%s: %s', type(exc).__name__, exc)
        return jsonify(error=str(exc), kind=type(exc).__name__), exc.status_code

    register_routes(app)
    return app


def register_routes(app):

    # --- AUTH ---

    @app.route('/signup', methods=['POST'])
    def signup():
        form = _form()
        email = (form.get('email') or '').strip().lower()
        password = form.get('password') or ''
        if not email or len(password) < 6:
            return jsonify(error='Email and a password of at least 6 characters are required.'), 400

        user = User(email=email, username=form.get('username'),
                    password_hash=generate_password_hash(password))
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return jsonify(error='An account with that email already exists.'), 409

        app.logger.info('New account %s', user.id)
        return jsonify(user.profile()), 201

    @app.route('/login', methods=['POST'])
    def login():
        form = _form()
        email = (form.get('email') or '').strip().lower()
        user = User.query.filter_by(email=email).first()

        if user and check_password_hash(user.password_hash, form.get('password') or ''):
            login_user(user)
            return jsonify(user.profile())
        return jsonify(error='Login failed. Please check your credentials.'), 401

    @app.route('/logout', methods=['POST'])
    @login_required
    def logout():
        logout_user()
        return jsonify(ok=True)

    # --- DASHBOARD ---

    @app.route('/')
    @login_required
    def dashboard():
        result = budget.load_cycle(_store(), current_user)
        return jsonify(
            profile=current_user.profile(),
            currency=app.config['CURRENCY'],
            reset_occurred=result.reset_occurred,
            cycle=budget.cycle_summary(result.state),
            tasks=[t.to_dict() for t in planner.list_tasks(current_user)],
            reminders=[r.to_dict() for r in planner.list_reminders(current_user)],
        )

    # --- EXPENSE TRACKER ---

    @app.route('/expenses', methods=['GET'])
    @login_required
    def expenses():
        result = budget.load_cycle(_store(), current_user)
        summary = budget.cycle_summary(result.state)
        summary['reset_occurred'] = result.reset_occurred
        return jsonify(summary)

    @app.route('/allowance', methods=['POST'])
    @login_required
    def set_allowance():
        state = budget.set_allowance(_store(), current_user, _form().get('amount'))
        app.logger.info('Allowance for user %s set to %s', current_user.id, state.period.amount)
        return jsonify(budget.cycle_summary(state))

    @app.route('/expenses', methods=['POST'])
    @login_required
    def add_expense():
        form = _form()
        state, expense = budget.add_expense(
            _store(), current_user,
            form.get('description'), form.get('amount'), form.get('category'),
        )
        summary = budget.cycle_summary(state)
        summary['expense_id'] = expense.id
        return jsonify(summary), 201

    @app.route('/expenses/<expense_id>', methods=['DELETE'])
    @login_required
    def delete_expense(expense_id):
        state = budget.remove_expense(_store(), current_user, expense_id)
        return jsonify(budget.cycle_summary(state))

    @app.route('/report')
    @login_required
    def report():
        state = budget.load_cycle(_store(), current_user).state
        summary = budget.cycle_summary(state)
        return jsonify(
            categories=spending_by_category(state.expenses),
            total_spent=summary['total_spent'],
            remaining_balance=summary['remaining_balance'],
        )

    # --- STUDY PLANNER ---

    @app.route('/tasks', methods=['GET', 'POST'])
    @login_required
    def tasks():
        if request.method == 'POST':
            form = _form()
            task = planner.add_task(
                current_user,
                form.get('title'),
                form.get('description'),
                form.get('due_date'),
                form.get('status') or 'pending',
            )
            return jsonify(task.to_dict()), 201
        return jsonify([t.to_dict() for t in planner.list_tasks(current_user)])

    @app.route('/tasks/<int:task_id>/status', methods=['POST'])
    @login_required
    def update_task_status(task_id):
        task = planner.update_task_status(current_user, task_id, _form().get('status'))
        return jsonify(task.to_dict() if task else None)

    @app.route('/tasks/<int:task_id>', methods=['DELETE'])
    @login_required
    def delete_task(task_id):
        return jsonify(deleted=planner.delete_task(current_user, task_id))

    @app.route('/reminders', methods=['GET', 'POST'])
    @login_required
    def reminders():
        if request.method == 'POST':
            form = _form()
            reminder = planner.add_reminder(
                current_user, form.get('course'), form.get('weekday'), form.get('time'))
            return jsonify(reminder.to_dict()), 201
        return jsonify([r.to_dict() for r in planner.list_reminders(current_user)])

    @app.route('/reminders/<int:reminder_id>', methods=['DELETE'])
    @login_required
    def delete_reminder(reminder_id):
        return jsonify(deleted=planner.delete_reminder(current_user, reminder_id))

    # --- ACCOUNT ---

    @app.route('/account', methods=['GET', 'POST'])
    @login_required
    def account():
        if request.method == 'POST':
            form = _form()
            for field in ('username', 'full_name', 'website', 'avatar_url'):
                if field in form:
                    setattr(current_user, field, form.get(field))
            db.session.commit()
        return jsonify(current_user.profile())


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(debug=True)
