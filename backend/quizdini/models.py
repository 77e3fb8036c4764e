from quizdini import db
from datetime import datetime
import string
import random

class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(16), nullable=True)
    first_name = db.Column(db.String(64), nullable=True)
    last_name = db.Column(db.String(64), nullable=True)
    # Display name shown on game splash screens, e.g. "Mr. Smith"
    author = db.Column(db.String(128), nullable=True)
    matches = db.relationship('Match', back_populates='user')

    def display_name(self):
        if self.author:
            return self.author
        parts = [p for p in (self.title, self.last_name or self.first_name) if p]
        return ' '.join(parts)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'author': self.display_name(),
        }

def generate_match_id(length=8):
    """Generate a unique, short match id for use in game URLs."""
    while True:
        code = ''.join(random.choices(string.ascii_letters + string.digits, k=length))
        if not Match.query.filter_by(match_id=code).first():
            return code

class Match(db.Model):
    __tablename__ = 'matches'
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.String(16), unique=True, index=True, nullable=False)
    title = db.Column(db.String(128), nullable=False)
    instructions = db.Column(db.Text, nullable=True)
    # {colorScheme, duration, itemsPerBoard}
    options = db.Column(db.JSON, nullable=True)
    # [{term, definition}, ...]
    pairs = db.Column(db.JSON, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    create_date = db.Column(db.DateTime, default=datetime.utcnow)
    update_date = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    user = db.relationship('User', back_populates='matches')

    def __init__(self, **kwargs):
        super(Match, self).__init__(**kwargs)
        if not self.match_id:
            self.match_id = generate_match_id()

    def to_definition(self):
        """Game definition as served to players; the author is mapped to a display name."""
        return {
            'id': self.match_id,
            'title': self.title,
            'author': self.user.display_name() if self.user else '',
            'instructions': self.instructions or '',
            'options': dict(self.options or {}),
            'pairs': [{'term': p.get('term', ''), 'definition': p.get('definition', '')} for p in (self.pairs or [])],
        }

class Ping(db.Model):
    __tablename__ = 'ping'
    id = db.Column(db.Integer, primary_key=True)
    ip_address = db.Column(db.String(64), nullable=True)
    game_id = db.Column(db.String(16), nullable=False, index=True)
    game_type = db.Column(db.String(8), nullable=False, default='M')
    results = db.Column(db.JSON, nullable=True)
    create_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'ip_address': self.ip_address,
            'game_id': self.game_id,
            'game_type': self.game_type,
            'results': self.results,
            'create_date': self.create_date.isoformat() if self.create_date else None,
        }
