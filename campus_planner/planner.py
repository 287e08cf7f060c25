# planner.py
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError

from campus_planner.errors import (
    CollaboratorUnavailable, InvalidStatus, InvalidWeekday, MissingField, NotFound,
)
from campus_planner.models import StudyReminder, StudyTask, db

TASK_STATUSES = ('pending', 'in_progress', 'completed')
WEEKDAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')


# --- HELPER: Validation shared with the legacy shell ---
def _required(value, label):
    value = (value or '').strip()
    if not value:
        raise MissingField(f'{label} cannot be empty.')
    return value


def validate_status(status):
    status = (status or '').strip().lower()
    if status not in TASK_STATUSES:
        raise InvalidStatus(f"Status must be one of {', '.join(TASK_STATUSES)}.")
    return status


def validate_weekday(weekday):
    weekday = (weekday or '').strip().capitalize()
    if weekday not in WEEKDAYS:
        raise InvalidWeekday(f'{weekday or "Weekday"} is not a day of the week.')
    return weekday


def validate_reminder(course, weekday, time):
    return _required(course, 'Course'), validate_weekday(weekday), _required(time, 'Time')


def parse_due_date(value):
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        raise MissingField('Due date must look like YYYY-MM-DD.') from None


def _save(action):
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise CollaboratorUnavailable(f'Could not save changes ({action}).') from exc


def _owned(model, user, item_id):
    item = model.query.filter_by(id=item_id, user_id=user.id).first()
    if item is None:
        raise NotFound(f'{model.__name__} {item_id} not found.')
    return item


# --- STUDY TASKS ---
def list_tasks(user):
    # Undated tasks sort last
    return (StudyTask.query.filter_by(user_id=user.id)
            .order_by(StudyTask.due_date.is_(None), StudyTask.due_date, StudyTask.id)
            .all())


def add_task(user, title, description='', due_date=None, status='pending'):
    task = StudyTask(
        user_id=user.id,
        title=_required(title, 'Title'),
        description=(description or '').strip(),
        due_date=parse_due_date(due_date),
        status=validate_status(status),
    )
    db.session.add(task)
    _save('adding task')
    return task


def update_task_status(user, task_id, status):
    """Returns the updated task, or None when it no longer exists."""
    status = validate_status(status)
    try:
        task = _owned(StudyTask, user, task_id)
    except NotFound:
        return None
    task.status = status
    _save('updating task')
    return task


def delete_task(user, task_id):
    try:
        task = _owned(StudyTask, user, task_id)
    except NotFound:
        return False
    db.session.delete(task)
    _save('deleting task')
    return True


# --- STUDY REMINDERS ---
def list_reminders(user):
    reminders = StudyReminder.query.filter_by(user_id=user.id).all()
    return sorted(reminders, key=lambda r: (WEEKDAYS.index(r.weekday), r.id))


def add_reminder(user, course, weekday, time):
    course, weekday, time = validate_reminder(course, weekday, time)
    reminder = StudyReminder(user_id=user.id, course=course, weekday=weekday, time=time)
    db.session.add(reminder)
    _save('adding reminder')
    return reminder


def delete_reminder(user, reminder_id):
    try:
        reminder = _owned(StudyReminder, user, reminder_id)
    except NotFound:
        return False
    db.session.delete(reminder)
    _save('deleting reminder')
    return True
