from debatify import db, bcrypt
from debatify.services.debates.awards import award_icon, award_label
from flask_login import UserMixin
from datetime import datetime, timezone
import uuid


def _new_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'profiles'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(128), nullable=False, default='')
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    debates = db.relationship('Debate', back_populates='organizer', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
        }


DEBATE_STATUSES = ('upcoming', 'in_progress', 'completed')


class Debate(db.Model):
    __tablename__ = 'debates'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    organizer_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    topic = db.Column(db.Text, nullable=False)
    debate_date = db.Column(db.DateTime, nullable=False)
    number_of_teams = db.Column(db.Integer, nullable=False, default=2)
    status = db.Column(db.String(32), nullable=False, default='upcoming')  # upcoming, in_progress, completed
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    organizer = db.relationship('User', back_populates='debates')
    participants = db.relationship('Participant', back_populates='debate', cascade='all, delete-orphan')
    teams = db.relationship('Team', back_populates='debate', cascade='all, delete-orphan')
    awards = db.relationship('Award', back_populates='debate', cascade='all, delete-orphan')

    def to_dict(self, include_roster=False):
        data = {
            'id': self.id,
            'organizer_id': self.organizer_id,
            'title': self.title,
            'topic': self.topic,
            'debate_date': _iso(self.debate_date),
            'number_of_teams': self.number_of_teams,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_roster:
            participants = [p.to_dict() for p in self.participants]
            data['participants'] = participants
            data['teams'] = [t.to_dict() for t in self.teams]
            data['for'] = [p for p in participants if p['team'] == 'for']
            data['against'] = [p for p in participants if p['team'] == 'against']
        return data


class Participant(db.Model):
    __tablename__ = 'participants'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    debate_id = db.Column(db.String(36), db.ForeignKey('debates.id'), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    team = db.Column(db.String(32), nullable=False)  # for, against
    individual_score = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    debate = db.relationship('Debate', back_populates='participants')
    awards = db.relationship('Award', back_populates='participant', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'debate_id': self.debate_id,
            'name': self.name,
            'team': self.team,
            'individual_score': self.individual_score,
        }


class Team(db.Model):
    __tablename__ = 'teams'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    debate_id = db.Column(db.String(36), db.ForeignKey('debates.id'), nullable=False, index=True)
    team_name = db.Column(db.String(32), nullable=False)
    team_score = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    debate = db.relationship('Debate', back_populates='teams')

    def to_dict(self):
        return {
            'id': self.id,
            'debate_id': self.debate_id,
            'team_name': self.team_name,
            'team_score': self.team_score,
        }


class Award(db.Model):
    __tablename__ = 'awards'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    debate_id = db.Column(db.String(36), db.ForeignKey('debates.id'), nullable=False, index=True)
    participant_id = db.Column(db.String(36), db.ForeignKey('participants.id'), nullable=False)
    award_type = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    debate = db.relationship('Debate', back_populates='awards')
    participant = db.relationship('Participant', back_populates='awards')

    __table_args__ = (
        db.UniqueConstraint('participant_id', 'award_type', name='uq_award_participant_type'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'debate_id': self.debate_id,
            'participant_id': self.participant_id,
            'participant_name': self.participant.name if self.participant else 'Unknown',
            'award_type': self.award_type,
            'label': award_label(self.award_type),
            'icon': award_icon(self.award_type),
        }


class DebateTopic(db.Model):
    __tablename__ = 'debate_topics'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    topic = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(64), nullable=False, default='general')
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'topic': self.topic,
            'category': self.category,
        }
