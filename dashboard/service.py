"""
Dashboard web boundary (Flask)

Exposes the AppState to a presentation layer as JSON: one render-ready
snapshot endpoint plus one endpoint per user intent. Every intent answers
with {"ok": bool, "state": <snapshot>} so the client can re-render at once.
"""

import logging
from typing import Optional

import pydantic
from flask import Flask, abort, current_app, jsonify, request

from dashboard.models import RateLimitConfig, RegistrationForm, Severity
from dashboard.state import AppState

logger = logging.getLogger(__name__)

TRUTHY = {"true", "1", "yes", "on"}


def create_app(state: Optional[AppState] = None, mount: bool = True) -> Flask:
    """
    Build the Flask app around a dashboard state.
    
    Args:
        state: Existing state (tests); a new one from env config otherwise
        mount: Mount the state (initial refresh) if it is not mounted yet
    """
    app = Flask(__name__)
    state = state or AppState()
    if mount and not state.mounted:
        state.mount()
    app.extensions["dashboard_state"] = state
    registry_url = getattr(state.client, "base_url", "custom client")
    logger.info(f"Dashboard app ready (registry={registry_url})")

    register_routes(app)
    return app


def get_state() -> AppState:
    return current_app.extensions["dashboard_state"]


def _payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _respond(ok: bool = True, status: int = 200):
    return jsonify({"ok": ok, "state": get_state().snapshot()}), status


def _service_or_404(service_id: int):
    service = get_state().mirror.get(service_id)
    if service is None:
        abort(404, description=f"Service {service_id} is not in the dashboard")
    return service


def register_routes(app: Flask):
    @app.route('/api/state')
    def state_view():
        return jsonify(get_state().snapshot())

    @app.route('/api/filter', methods=['POST'])
    def set_filter():
        data = _payload()
        get_state().set_filter(
            search_query=data.get("searchQuery"),
            status_filter=data.get("statusFilter"),
        )
        return _respond()

    @app.route('/api/refresh', methods=['POST'])
    def refresh():
        return _respond(get_state().operations.refresh())

    @app.route('/api/auto-refresh/toggle', methods=['POST'])
    def toggle_auto_refresh():
        get_state().toggle_auto_refresh()
        return _respond()

    # Register / deregister
    @app.route('/api/register/open', methods=['POST'])
    def open_register():
        get_state().surfaces.register.open()
        return _respond()

    @app.route('/api/register/close', methods=['POST'])
    def close_register():
        get_state().surfaces.register.close()
        return _respond()

    @app.route('/api/services', methods=['POST'])
    def register_service():
        state = get_state()
        data = _payload()
        try:
            form = RegistrationForm.model_validate(data)
        except pydantic.ValidationError:
            state.notifications.emit("Please fill in all service fields", Severity.WARNING)
            return _respond(False, 400)
        state.surfaces.register.form = form
        instance = state.operations.register(form)
        return _respond(instance is not None, 201 if instance else 400)

    @app.route('/api/services/<int:service_id>', methods=['DELETE'])
    def deregister_service(service_id):
        service = _service_or_404(service_id)
        confirmed = str(request.args.get("confirm", _payload().get("confirm", ""))).lower() in TRUTHY
        ok = get_state().operations.deregister(service, confirm=lambda _: confirmed)
        return _respond(ok, 200 if ok or not confirmed else 502)

    @app.route('/api/services/<int:service_id>/heartbeat', methods=['PUT'])
    def heartbeat(service_id):
        service = _service_or_404(service_id)
        ok = get_state().operations.heartbeat(service)
        return _respond(ok, 200 if ok else 502)

    # Detail view
    @app.route('/api/services/<int:service_id>/detail', methods=['POST'])
    def open_detail(service_id):
        get_state().surfaces.detail.open(_service_or_404(service_id))
        return _respond()

    @app.route('/api/detail/close', methods=['POST'])
    def close_detail():
        get_state().surfaces.detail.close()
        return _respond()

    # Rate limit editor
    @app.route('/api/services/<int:service_id>/rate-limit', methods=['POST'])
    def open_rate_limit(service_id):
        get_state().surfaces.rate_limit.open(_service_or_404(service_id))
        return _respond()

    @app.route('/api/rate-limit', methods=['PUT'])
    def save_rate_limit():
        state = get_state()
        surface = state.surfaces.rate_limit
        data = {**surface.config.to_wire(), **_payload()}
        try:
            surface.config = RateLimitConfig.model_validate(data)
        except pydantic.ValidationError:
            state.notifications.emit("Please enter a valid rate limit", Severity.WARNING)
            return _respond(False, 400)
        ok = state.operations.save_rate_limit()
        return _respond(ok, 200 if ok else 502)

    @app.route('/api/rate-limit/close', methods=['POST'])
    def close_rate_limit():
        get_state().surfaces.rate_limit.close()
        return _respond()

    # Virtual domain editor
    @app.route('/api/services/<int:service_id>/virtual-domain', methods=['POST'])
    def open_virtual_domain(service_id):
        get_state().surfaces.virtual_domain.open(_service_or_404(service_id))
        return _respond()

    @app.route('/api/virtual-domain', methods=['PUT'])
    def save_virtual_domain():
        state = get_state()
        surface = state.surfaces.virtual_domain
        data = _payload()
        if "virtualDomain" in data:
            surface.virtual_domain = str(data.get("virtualDomain") or "")
        ok = state.operations.save_virtual_domain()
        return _respond(ok, 200 if ok else 502)

    @app.route('/api/virtual-domain/close', methods=['POST'])
    def close_virtual_domain():
        get_state().surfaces.virtual_domain.close()
        return _respond()

    @app.route('/api/resolve/<path:virtual_domain>')
    def resolve_virtual_domain(virtual_domain):
        instance = get_state().operations.resolve_virtual_domain(virtual_domain)
        return _respond(instance is not None, 200 if instance else 404)
