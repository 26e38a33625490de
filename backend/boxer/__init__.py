from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config, engine_options_for

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
# Only used to run store housekeeping as background tasks
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

DEMO_ENTRIES = [
    ('Rocky', 2450, 'C'),
    ('Tyson', 5800, 'B'),
    ('Saitama', 9720, 'SSS'),
    ('Ippo', 7100, 'A'),
    ('Balrog', 8800, 'S'),
]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.config.setdefault(
        'SQLALCHEMY_ENGINE_OPTIONS',
        engine_options_for(flask_app.config['SQLALCHEMY_DATABASE_URI'], int(flask_app.config.get('SHARED_STORE_TIMEOUT_SEC', 8))),
    )

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from boxer.main import main
    flask_app.register_blueprint(main)

    from boxer.api.punch import punch
    flask_app.register_blueprint(punch, url_prefix='/api/v1')

    from boxer.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    # Compose the one store handle this process uses
    from boxer.models import LeaderboardRow
    from boxer.services.leaderboard import init_leaderboard
    init_leaderboard(flask_app, db, LeaderboardRow, socketio)

    from boxer.services.judge import DEFAULT_MODEL, PunchJudge
    flask_app.extensions['punch_judge'] = PunchJudge(
        api_key=flask_app.config.get('GEMINI_API_KEY'),
        model_name=flask_app.config.get('GEMINI_MODEL') or DEFAULT_MODEL,
        temperature=flask_app.config.get('GEMINI_TEMPERATURE', 0.7),
        timeout=flask_app.config.get('JUDGE_TIMEOUT_SEC', 20),
        logger=flask_app.logger,
    )

    @click.command('db-reset')
    @click.option('--seed', is_flag=True, help='Insert a few demo entries.')
    def db_reset_command(seed):
        """Drops and recreates the database, optionally seeding it."""
        from boxer.services.leaderboard import get_leaderboard
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            board = get_leaderboard()
            if board.store.backend == 'local':
                board.store.clear()
            if seed:
                for name, score, rank in DEMO_ENTRIES:
                    board.gateway.submit(name, score, rank)
            print('Database has been reset' + (' and seeded!' if seed else '!'))

    @click.command('leaderboard-top')
    @click.option('-n', 'count', default=10, show_default=True, help='How many entries to show.')
    def leaderboard_top_command(count):
        """Prints the top N entries of the configured store."""
        from boxer.services.leaderboard import get_leaderboard
        with flask_app.app_context():
            entries = get_leaderboard().ranking.top_n(count)
            if not entries:
                print('Leaderboard is empty.')
            for position, entry in enumerate(entries, start=1):
                print(f'{position:>3}. {entry.name:<20} {entry.score:>5} {entry.rank}')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_top_command)

    return flask_app
