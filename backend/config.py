import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///debatify.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Shared countdown timer
    # Local storage document the timer writes through to. Empty keeps it in memory only.
    TIMER_STORAGE_PATH = os.environ.get('TIMER_STORAGE_PATH', os.path.join(BASE_DIR, 'instance', 'local_storage.json')) or None
    TIMER_STORAGE_KEY = os.environ.get('TIMER_STORAGE_KEY', 'debatify_timer')
    TIMER_DEFAULT_PRESET_SEC = int(os.environ.get('TIMER_DEFAULT_PRESET_SEC', '300'))
    TIMER_TICK_INTERVAL_SEC = float(os.environ.get('TIMER_TICK_INTERVAL_SEC', '1.0'))
    # Debates
    SUGGESTED_TOPICS_LIMIT = int(os.environ.get('SUGGESTED_TOPICS_LIMIT', '5'))
    MIN_PARTICIPANTS = int(os.environ.get('MIN_PARTICIPANTS', '2'))
