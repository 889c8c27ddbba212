"""
Sync API — run triggers, run log, stored leads, CRM connection test.
"""
import logging
from flask import Blueprint, request, jsonify

from planning_sync.pipeline.manager import launch_sync, launch_all_syncs
from planning_sync.services.ghl import GhlClient
from planning_sync.services.repository import SqlSyncRepository

logger = logging.getLogger('routes.api')

bp = Blueprint('api', __name__)

MAX_RUNS_LIMIT = 500


def _repository():
    return SqlSyncRepository()


# ── Triggers ─────────────────────────────────────────────────────────────────

@bp.route('/api/clients/<client_id>/sync', methods=['POST'])
def trigger_client_sync(client_id):
    """Enqueue a sync for one client ("run this now")."""
    repository = _repository()
    client = repository.get_client(client_id)
    if client is None:
        return jsonify({'error': 'Client not found'}), 404
    if not client.active:
        return jsonify({'error': 'Client is inactive'}), 409
    if repository.get_criteria(client_id) is None:
        return jsonify({'error': 'Client has no sync criteria'}), 409

    try:
        job = launch_sync(client_id)
    except Exception as e:
        logger.error("Failed to enqueue sync for %s", client_id, exc_info=True)
        return jsonify({'error': str(e)}), 500

    return jsonify({'client_id': client_id, 'job_id': job.id}), 202


@bp.route('/api/sync', methods=['POST'])
def trigger_all_syncs():
    """Enqueue a sync for every active client; {"only_due": true} limits to today's schedule."""
    data = request.get_json(silent=True) or {}
    try:
        jobs = launch_all_syncs(only_due=bool(data.get('only_due')), repository=_repository())
    except Exception as e:
        logger.error("Failed to enqueue syncs", exc_info=True)
        return jsonify({'error': str(e)}), 500

    return jsonify({'job_ids': [job.id for job in jobs]}), 202


# ── Run log + leads ──────────────────────────────────────────────────────────

@bp.route('/api/runs')
def list_runs():
    """Sync run log, newest first. Optional ?client_id= and ?limit=."""
    client_id = request.args.get('client_id') or None
    limit = request.args.get('limit', 50, type=int)
    limit = max(1, min(limit, MAX_RUNS_LIMIT))
    runs = _repository().list_runs(client_id=client_id, limit=limit)
    return jsonify([run.to_dict() for run in runs])


@bp.route('/api/clients/<client_id>/leads')
def list_leads(client_id):
    """Every lead stored for a client, newest first."""
    repository = _repository()
    if repository.get_client(client_id) is None:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify([lead.to_dict() for lead in repository.list_leads(client_id)])


# ── CRM ──────────────────────────────────────────────────────────────────────

@bp.route('/api/clients/<client_id>/test-connection', methods=['POST'])
def test_connection(client_id):
    """Check the client's CRM credentials against its location."""
    client = _repository().get_client(client_id)
    if client is None:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify({'client_id': client_id, 'ok': GhlClient().test_connection(client)})
