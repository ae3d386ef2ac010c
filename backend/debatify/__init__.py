from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import atexit
import json
import os
import weakref
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

# Timers of every app built in this process, held weakly
_live_timers = weakref.WeakSet()


@atexit.register
def _shutdown_timers():
    for timer in list(_live_timers):
        timer.shutdown()


DEMO_TOPICS = [
    ('This house would ban homework in primary schools', 'education'),
    ('This house believes social media does more harm than good', 'technology'),
    ('This house would make voting compulsory', 'politics'),
    ('This house would replace exams with continuous assessment', 'education'),
    ('This house believes space exploration is worth the cost', 'science'),
    ('This house would introduce a four-day working week', 'economics'),
]


def get_timer():
    """The process-wide TimerService of the current application."""
    return current_app.extensions['timer']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    # relative sqlite paths resolve into the instance folder
    os.makedirs(flask_app.instance_path, exist_ok=True)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One countdown for the whole process; every view gets this instance
    from debatify.services.timer import build_timer_service
    timer = build_timer_service(flask_app.config, socketio, logger=flask_app.logger)
    flask_app.extensions['timer'] = timer
    _live_timers.add(timer)

    from debatify.main import main
    flask_app.register_blueprint(main)

    from debatify.api.timer import timer_api
    flask_app.register_blueprint(timer_api, url_prefix='/api/timer')

    from debatify.api.debates import debates, topics
    flask_app.register_blueprint(debates, url_prefix='/api/debates')
    flask_app.register_blueprint(topics, url_prefix='/api/topics')

    from debatify.socketio_events import register_socketio_handlers, broadcast_timer
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    timer.subscribe(broadcast_timer)

    from debatify.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return {'error': 'Login required'}, 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from debatify.models import DebateTopic
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed organizers
            for idx in range(1, 4):
                user = User(email=f'organizer{idx}@example.com', full_name=f'Organizer {idx}')
                user.set_password('password')
                db.session.add(user)

            for topic, category in DEMO_TOPICS:
                db.session.add(DebateTopic(topic=topic, category=category))

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('timer-status')
    def timer_status_command():
        """Prints the shared timer as restored from local storage."""
        state = flask_app.extensions['timer'].snapshot()
        print(json.dumps(state.to_dict()))

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(timer_status_command)

    return flask_app
