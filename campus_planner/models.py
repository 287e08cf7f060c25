# models.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin

from campus_planner.cycle import utcnow

# Initialize the database
db = SQLAlchemy()


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)

    # Profile fields shown on the account page
    username = db.Column(db.String(80))
    full_name = db.Column(db.String(120))
    website = db.Column(db.String(200))
    avatar_url = db.Column(db.String(200))
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    allowance = db.relationship('Allowance', backref='user', uselist=False, lazy=True)
    expenses = db.relationship('ExpenseRow', backref='user', lazy=True)
    study_tasks = db.relationship('StudyTask', backref='user', lazy=True)
    study_reminders = db.relationship('StudyReminder', backref='user', lazy=True)

    def profile(self):
        return {
            'email': self.email,
            'username': self.username,
            'full_name': self.full_name,
            'website': self.website,
            'avatar_url': self.avatar_url,
        }


class Allowance(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    period_start = db.Column(db.Date)  # None until the first allowance is set
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)


class ExpenseRow(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.String(32), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    description = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(50), nullable=False, default='others')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    archived_at = db.Column(db.DateTime)  # Set when a weekly reset archives the row


class StudyTask(db.Model):
    __tablename__ = 'study_tasks'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')
    due_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='pending')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'status': self.status,
        }


class StudyReminder(db.Model):
    __tablename__ = 'study_reminders'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    course = db.Column(db.String(200), nullable=False)
    weekday = db.Column(db.String(10), nullable=False, default='Monday')
    time = db.Column(db.String(20), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'course': self.course, 'weekday': self.weekday, 'time': self.time}
