from flask import Blueprint, jsonify, request, current_app, abort
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from datetime import datetime
from debatify import db, socketio
from debatify.models import Debate, Participant, Team, Award, DebateTopic, DEBATE_STATUSES
from debatify.services.debates import (
    TEAM_NAMES,
    assign_teams,
    award_choices,
    clamp_score,
    clean_names,
    is_award_type,
    parse_score,
)


debates = Blueprint('debates', __name__)
topics = Blueprint('topics', __name__)


def _emit_debate_update(debate_id: str) -> None:
    socketio.emit('state_update', {'debate_id': debate_id}, to=f"debate:{debate_id}", namespace='/ws')


def _owned_debate_or_404(debate_id: str) -> Debate:
    debate = Debate.query.filter_by(id=debate_id).first_or_404()
    if debate.organizer_id != current_user.id:
        abort(404)
    return debate


def _parse_debate_date(value):
    if not value or not isinstance(value, str):
        return None
    try:
        # datetime-local inputs send 'YYYY-MM-DDTHH:MM'
        return datetime.fromisoformat(value)
    except ValueError:
        return None


@debates.route('', methods=['GET'])
@login_required
def list_debates():
    rows = (
        Debate.query.filter_by(organizer_id=current_user.id)
        .order_by(Debate.debate_date.asc())
        .all()
    )
    return jsonify([d.to_dict() for d in rows])


@debates.route('', methods=['POST'])
@login_required
def create_debate():
    data = request.get_json(silent=True) or {}
    title = (data.get('title') or '').strip()
    topic = (data.get('topic') or '').strip()
    debate_date = _parse_debate_date(data.get('debate_date'))
    if not all([title, topic]):
        return jsonify({'error': 'Title and topic are required'}), 400
    if debate_date is None:
        return jsonify({'error': 'debate_date must be an ISO date and time'}), 400

    names = clean_names(data.get('participants') or [])
    min_participants = int(current_app.config.get('MIN_PARTICIPANTS', 2))
    if len(names) < min_participants:
        return jsonify({'error': f'Please add at least {min_participants} participants'}), 400

    debate = Debate(
        organizer_id=current_user.id,
        title=title,
        topic=topic,
        debate_date=debate_date,
        number_of_teams=len(TEAM_NAMES),
        status='upcoming',
    )
    db.session.add(debate)
    try:
        db.session.flush()
        for name, team in assign_teams(names):
            db.session.add(Participant(debate_id=debate.id, name=name, team=team))
        for team_name in TEAM_NAMES:
            db.session.add(Team(debate_id=debate.id, team_name=team_name, team_score=0))
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.warning(f"[debate-create-failed] organizer={current_user.id} error={exc}")
        return jsonify({'error': 'Failed to create debate'}), 400

    current_app.logger.info(f"[debate-create] debate={debate.id} participants={len(names)}")
    return jsonify(debate.to_dict(include_roster=True)), 201


@debates.route('/<string:debate_id>', methods=['GET'])
@login_required
def get_debate(debate_id):
    debate = _owned_debate_or_404(debate_id)
    return jsonify(debate.to_dict(include_roster=True))


@debates.route('/<string:debate_id>', methods=['DELETE'])
@login_required
def delete_debate(debate_id):
    debate = _owned_debate_or_404(debate_id)
    db.session.delete(debate)
    db.session.commit()
    current_app.logger.info(f"[debate-delete] debate={debate_id}")
    _emit_debate_update(debate_id)
    return jsonify({'success': True})


@debates.route('/<string:debate_id>/status', methods=['PATCH'])
@login_required
def update_status(debate_id):
    debate = _owned_debate_or_404(debate_id)
    status = (request.get_json(silent=True) or {}).get('status')
    if status not in DEBATE_STATUSES:
        return jsonify({'error': f"status must be one of {', '.join(DEBATE_STATUSES)}"}), 400
    debate.status = status
    db.session.add(debate)
    db.session.commit()
    _emit_debate_update(debate.id)
    return jsonify(debate.to_dict())


@debates.route('/<string:debate_id>/participants/<string:participant_id>/score', methods=['PATCH'])
@login_required
def update_participant_score(debate_id, participant_id):
    debate = _owned_debate_or_404(debate_id)
    participant = Participant.query.filter_by(id=participant_id, debate_id=debate.id).first_or_404()
    data = request.get_json(silent=True) or {}
    if 'delta' in data:
        new_score = participant.individual_score + parse_score(data.get('delta'))
    elif 'score' in data:
        new_score = parse_score(data.get('score'))
    else:
        return jsonify({'error': 'score or delta is required'}), 400
    participant.individual_score = clamp_score(new_score)
    db.session.add(participant)
    db.session.commit()
    _emit_debate_update(debate.id)
    return jsonify(participant.to_dict())


@debates.route('/<string:debate_id>/teams/<string:team_id>/score', methods=['PATCH'])
@login_required
def update_team_score(debate_id, team_id):
    debate = _owned_debate_or_404(debate_id)
    team = Team.query.filter_by(id=team_id, debate_id=debate.id).first_or_404()
    data = request.get_json(silent=True) or {}
    team.team_score = clamp_score(parse_score(data.get('score')))
    db.session.add(team)
    db.session.commit()
    _emit_debate_update(debate.id)
    return jsonify(team.to_dict())


@debates.route('/<string:debate_id>/awards', methods=['GET'])
@login_required
def list_awards(debate_id):
    debate = _owned_debate_or_404(debate_id)
    awards = Award.query.filter_by(debate_id=debate.id).order_by(Award.created_at.asc()).all()
    return jsonify({'awards': [a.to_dict() for a in awards], 'award_types': award_choices()})


@debates.route('/<string:debate_id>/awards', methods=['POST'])
@login_required
def add_award(debate_id):
    debate = _owned_debate_or_404(debate_id)
    data = request.get_json(silent=True) or {}
    participant_id = data.get('participant_id')
    award_type = data.get('award_type')
    if not all([participant_id, award_type]):
        return jsonify({'error': 'participant_id and award_type are required'}), 400
    if not is_award_type(award_type):
        return jsonify({'error': f'Unknown award type {award_type}'}), 400
    participant = Participant.query.filter_by(id=participant_id, debate_id=debate.id).first()
    if not participant:
        return jsonify({'error': 'Invalid participant'}), 400
    if Award.query.filter_by(participant_id=participant.id, award_type=award_type).first():
        return jsonify({'error': 'This participant already has this award'}), 409

    award = Award(debate_id=debate.id, participant_id=participant.id, award_type=award_type)
    db.session.add(award)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'This participant already has this award'}), 409
    current_app.logger.info(f"[award-add] debate={debate.id} participant={participant.id} type={award_type}")
    _emit_debate_update(debate.id)
    return jsonify(award.to_dict()), 201


@debates.route('/<string:debate_id>/awards/<string:award_id>', methods=['DELETE'])
@login_required
def remove_award(debate_id, award_id):
    debate = _owned_debate_or_404(debate_id)
    award = Award.query.filter_by(id=award_id, debate_id=debate.id).first_or_404()
    db.session.delete(award)
    db.session.commit()
    _emit_debate_update(debate.id)
    return jsonify({'success': True})


@topics.route('', methods=['GET'])
def suggested_topics():
    default_limit = int(current_app.config.get('SUGGESTED_TOPICS_LIMIT', 5))
    limit = request.args.get('limit', default_limit, type=int)
    limit = max(1, min(limit or default_limit, 50))
    rows = DebateTopic.query.order_by(DebateTopic.created_at.asc()).limit(limit).all()
    return jsonify([t.to_dict() for t in rows])
