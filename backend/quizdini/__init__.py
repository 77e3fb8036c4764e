from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Match definitions are cached per process
    from quizdini.services.cache import MatchCache
    flask_app.extensions['match_cache'] = MatchCache() if flask_app.config.get('MATCH_CACHE_ENABLED', True) else None

    # Import and register blueprints here
    from quizdini.routes import main
    flask_app.register_blueprint(main)

    from quizdini.api.match import match
    flask_app.register_blueprint(match, url_prefix='/api/match')

    from quizdini.api.ping import ping
    flask_app.register_blueprint(ping, url_prefix='/api/ping')

    # Register Socket.IO event handlers
    from quizdini.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-seed')
    def db_seed_command():
        """Creates tables and seeds a demo author and match."""
        from quizdini.models import User, Match
        with flask_app.app_context():
            db.create_all()

            author = User(title='Ms.', first_name='Ada', last_name='Lovelace', author='Ms. Lovelace')
            db.session.add(author)
            demo = Match(
                match_id='demo',
                title='Parts of a Cell',
                instructions='Drag each term onto its definition.',
                options={'colorScheme': 'rainbow', 'duration': 90, 'itemsPerBoard': 4},
                pairs=[
                    {'term': 'Nucleus', 'definition': 'Holds the genetic material'},
                    {'term': 'Mitochondria', 'definition': 'Produces energy for the cell'},
                    {'term': 'Ribosome', 'definition': 'Builds proteins'},
                    {'term': 'Cell membrane', 'definition': 'Controls what enters and leaves'},
                    {'term': 'Chloroplast', 'definition': 'Site of photosynthesis'},
                    {'term': 'Vacuole', 'definition': 'Stores water and nutrients'},
                ],
                user=author,
            )
            db.session.add(demo)
            db.session.commit()
            print(f"Database has been seeded! Try /api/match/{demo.match_id}")

    flask_app.cli.add_command(db_seed_command)

    return flask_app
