# config.py
import os


def _flag(name, default='0'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-change-me')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///campus_planner.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Keep the ended week's expenses (stamped archived_at) instead of deleting them.
    ARCHIVE_ON_RESET = _flag('ARCHIVE_ON_RESET')
    CURRENCY = os.environ.get('CURRENCY', 'CFA')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    ARCHIVE_ON_RESET = False
