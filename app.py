"""Local User Manager Flask JSON interface.

Run: python app.py
Visit: http://localhost:5000/session
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, request, jsonify, send_file

from src.utils.config_manager import ConfigManager
from src.utils.logger import setup_logging
from src.utils.activity_exporter import ActivityExporter
from src.core.user_record_store import UserRecordStore
from src.core.session_manager import SessionManager, DEFAULT_TIMEOUT_MINUTES
from src.models.results import FailureReason

_STATUS_BY_REASON = {
    FailureReason.MISSING_FIELDS: 400,
    FailureReason.DUPLICATE_USERNAME: 409,
    FailureReason.PROTECTED_USER: 403,
    FailureReason.USER_NOT_FOUND: 404,
    FailureReason.STORAGE_ERROR: 507,
}


def _payload() -> dict:
    """Request fields from a JSON object body or a form; anything else is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    return data if isinstance(data, dict) else {}


def _public_user(user) -> dict:
    """User fields safe to return to a client."""
    return {
        'username': user.username,
        'role': user.role,
        'created_at': user.created_at,
    }


def create_app(config_path: str = None, store: UserRecordStore = None) -> Flask:
    """Build the app around a single store.

    Args:
        config_path: Path to configuration YAML. Uses the default if not provided.
        store: Pre-built store to serve (tests inject one). Built from config otherwise.
    """
    cfg = ConfigManager(config_path)
    log_cfg = cfg.get_logging_config()
    setup_logging('src', log_dir=log_cfg.get('log_dir'), level=log_cfg.get('level', 'INFO'))

    if store is None:
        store = UserRecordStore.from_config(cfg)
    store.initialize()

    sessions = SessionManager(
        store, timeout_minutes=cfg.get_session_config().get('timeout_minutes', DEFAULT_TIMEOUT_MINUTES)
    )
    exporter = ActivityExporter(cfg.get_export_config().get('output_dir', 'data/exports'))

    app = Flask(__name__)
    app.extensions['user_store'] = store
    app.extensions['session_manager'] = sessions

    def _require_login():
        if not sessions.is_logged_in():
            return jsonify({'error': 'Login required'}), 401
        return None

    def _require_admin():
        denied = _require_login()
        if denied:
            return denied
        if not sessions.is_admin():
            return jsonify({'error': 'Admin access required'}), 403
        return None

    def _require_self_or_admin(username):
        denied = _require_login()
        if denied:
            return denied
        current = sessions.get_current_user()
        if not current.is_admin and current.username != username:
            return jsonify({'error': 'Access denied'}), 403
        return None

    @app.before_request
    def _session_timeout():
        """Expire idle sessions, otherwise mark the session active."""
        if not sessions.check_timeout() and sessions.is_logged_in():
            sessions.touch()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @app.route('/login', methods=['POST'])
    def login():
        data = _payload()
        username = data.get('username', '')
        if not sessions.login_user(username, data.get('password', '')):
            return jsonify({
                'error': 'Invalid username or password',
                'reason': FailureReason.INVALID_CREDENTIALS.value,
            }), 401
        return jsonify({'user': _public_user(sessions.get_current_user())})

    @app.route('/logout', methods=['POST'])
    def logout():
        sessions.logout_user()
        return jsonify({'logged_out': True})

    @app.route('/session')
    def session_info():
        user = sessions.get_current_user()
        return jsonify({
            'logged_in': user is not None,
            'user': _public_user(user) if user else None,
        })

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @app.route('/users', methods=['GET'])
    def list_users():
        denied = _require_admin()
        if denied:
            return denied
        users = store.list_users()
        return jsonify({'count': len(users), 'users': [_public_user(u) for u in users]})

    @app.route('/users', methods=['POST'])
    def create_user():
        denied = _require_admin()
        if denied:
            return denied
        data = _payload()
        result = store.create_user_result(data.get('username', ''), data.get('password', ''))
        if not result:
            return jsonify(result.to_dict()), _STATUS_BY_REASON.get(result.reason, 400)
        return jsonify(result.to_dict()), 201

    @app.route('/users/<username>', methods=['DELETE'])
    def delete_user(username):
        denied = _require_admin()
        if denied:
            return denied
        result = store.delete_user_result(username)
        if not result:
            return jsonify(result.to_dict()), _STATUS_BY_REASON.get(result.reason, 400)
        return jsonify(result.to_dict())

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    @app.route('/users/<username>/activities')
    def user_activities(username):
        denied = _require_self_or_admin(username)
        if denied:
            return denied
        entries = store.get_activities_for(username)
        return jsonify({
            'username': username,
            'count': len(entries),
            'activities': [e.to_dict() for e in entries],
        })

    @app.route('/users/<username>/activities/export')
    def export_activities(username):
        """Download a user's activity log as CSV or JSON."""
        denied = _require_self_or_admin(username)
        if denied:
            return denied
        fmt = request.args.get('format', 'csv')
        try:
            path = exporter.export(store.get_activities_for(username), username, fmt=fmt)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        return send_file(
            os.path.abspath(path),
            mimetype='text/csv' if fmt == 'csv' else 'application/json',
            as_attachment=True,
            download_name=os.path.basename(path),
        )

    @app.route('/activities', methods=['POST'])
    def record_activity():
        denied = _require_login()
        if denied:
            return denied
        description = (_payload().get('description') or '').strip()
        if not description:
            return jsonify({'error': 'Description is required'}), 400
        current = sessions.get_current_user()
        if not store.record_activity(current.username, description):
            return jsonify({'error': 'Could not record activity'}), 507
        return jsonify({'recorded': True}), 201

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @app.route('/storage')
    def storage_usage():
        denied = _require_admin()
        if denied:
            return denied
        return jsonify(store.storage_usage().to_dict())

    @app.route('/reset', methods=['POST'])
    def reset():
        denied = _require_admin()
        if denied:
            return denied
        if not store.clear_all():
            return jsonify({'error': 'Could not clear data'}), 507
        return jsonify({'reset': True})

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5000)
