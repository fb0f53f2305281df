from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from flask import Blueprint, Response, current_app, g, jsonify, request, session
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .services import gym as gym_service
from .services import tasks as task_service
from .services.gym import GymLogValidationError
from .services.tasks import TaskNotFoundError
from .utils import dates
from .utils.auth import AuthError, login_required, session_user, verify_password
from .utils.dates import InvalidDateError

main_bp = Blueprint('main', __name__, url_prefix='/api')

logger = logging.getLogger(__name__)


# -----------------------------
# Error mapping
# -----------------------------
@main_bp.errorhandler(AuthError)
def handle_auth_error(exc: AuthError) -> Tuple[Response, int]:
    return jsonify({'message': exc.message}), exc.status_code


@main_bp.errorhandler(TaskNotFoundError)
def handle_task_not_found(exc: TaskNotFoundError) -> Tuple[Response, int]:
    logger.info('tasks.toggle.not_found', extra={'task_id': exc.task_id})
    return jsonify({'message': 'Task not found'}), 404


@main_bp.errorhandler(GymLogValidationError)
def handle_gym_validation(exc: GymLogValidationError) -> Tuple[Response, int]:
    return jsonify({'message': exc.message, 'field': exc.field}), 400


@main_bp.errorhandler(InvalidDateError)
def handle_invalid_date(exc: InvalidDateError) -> Tuple[Response, int]:
    return jsonify({'message': str(exc), 'field': exc.field}), 400


@main_bp.errorhandler(SQLAlchemyError)
def handle_storage_error(exc: SQLAlchemyError) -> Tuple[Response, int]:
    current_app.storage_service.rollback()
    logger.exception('storage.request_failed', extra={'path': request.path})
    return jsonify({'message': 'Internal server error'}), 500


# Registered twice: app-wide for unmatched URLs, and on the blueprint so it
# outranks the blueprint's catch-all Exception handler.
@main_bp.app_errorhandler(HTTPException)
@main_bp.errorhandler(HTTPException)
def handle_http_error(exc: HTTPException) -> Tuple[Response, int]:
    return jsonify({'message': exc.description or exc.name}), exc.code or 500


@main_bp.errorhandler(Exception)
def handle_unexpected_error(exc: Exception) -> Tuple[Response, int]:
    logger.exception('request.unhandled_error', extra={'path': request.path})
    return jsonify({'message': 'Internal server error'}), 500


# -----------------------------
# Health & auth
# -----------------------------
@main_bp.route('/health')
def health() -> Dict[str, Any]:
    return {'status': 'ok'}


@main_bp.route('/login', methods=['POST'])
def login() -> Response:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form.to_dict()

    username = data.get('username') or ''
    password = data.get('password') or ''  # do NOT strip passwords

    for field, value in (('username', username), ('password', password)):
        if not isinstance(value, str):
            return jsonify({'message': f'{field} must be a string', 'field': field}), 400
    username = username.strip()

    if not username or not password:
        missing = 'username' if not username else 'password'
        return jsonify({'message': 'username and password are required', 'field': missing}), 400

    user = current_app.storage_service.get_user_by_username(username)
    if user is None or not verify_password(user.password_hash, password):
        logger.info('auth.login.failed', extra={'username': username})
        raise AuthError('Invalid username or password')

    session.clear()
    session['user'] = user.to_dict()
    session.modified = True
    logger.info('auth.login.success', extra={'user_id': user.id})
    return jsonify(user.to_dict())


@main_bp.route('/logout', methods=['POST'])
def logout() -> Response:
    session.clear()
    return jsonify({'message': 'Logged out'})


@main_bp.route('/user')
def current_user() -> Response:
    user = session_user()
    if user is None:
        raise AuthError('Not authenticated')
    return jsonify(user)


# -----------------------------
# Tasks
# -----------------------------
@main_bp.route('/tasks')
@login_required
def list_tasks() -> Response:
    storage = current_app.storage_service
    marker, _ = task_service.reset_tasks_if_new_day(
        storage,
        g.user['id'],
        dates.today_iso(),
        marker=session.get('last_reset'),
    )
    if session.get('last_reset') != marker:
        session['last_reset'] = marker
        session.modified = True

    tasks: List[Dict[str, Any]] = [task.to_dict() for task in task_service.list_tasks(storage)]
    return jsonify(tasks)


@main_bp.route('/tasks/<int:task_id>/toggle', methods=['PATCH'])
@login_required
def toggle_task(task_id: int) -> Response:
    task = task_service.toggle_task(current_app.storage_service, task_id)
    return jsonify(task.to_dict())


# -----------------------------
# Gym
# -----------------------------
@main_bp.route('/gym/today')
@login_required
def gym_today() -> Response:
    log = gym_service.get_gym_log_or_default(current_app.storage_service, dates.today_iso())
    return jsonify(log)


@main_bp.route('/gym/log', methods=['POST'])
@login_required
def update_gym_log() -> Response:
    payload = request.get_json(silent=True)
    log = gym_service.upsert_gym_log(current_app.storage_service, dates.today_iso(), payload)
    return jsonify(log)


@main_bp.route('/gym/history')
@login_required
def gym_history() -> Response:
    start = request.args.get('from')
    end = request.args.get('to')
    logs = gym_service.gym_history(
        current_app.storage_service,
        start=dates.parse_date(start, 'from') if start else None,
        end=dates.parse_date(end, 'to') if end else None,
    )
    return jsonify(logs)


@main_bp.route('/gym/<log_date>')
@login_required
def gym_for_date(log_date: str) -> Response:
    log = gym_service.get_gym_log_or_default(
        current_app.storage_service, dates.parse_date(log_date)
    )
    return jsonify(log)
