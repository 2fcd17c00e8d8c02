from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import json_body, parse_enum, session_context
from ..core.enums import Transition
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/approvals/<transition>", methods=["POST"], endpoint="bulk_transition")
    def bulk_transition(transition: str):
        parsed = parse_enum(Transition, transition, "transition")
        actor = container.identity_service.current_actor(session_context())

        ids = json_body().get("ids") or []
        if not isinstance(ids, list) or not all(isinstance(uid, str) for uid in ids):
            raise ValidationError("ids must be a list of user identifiers")

        result = container.approval_workflow.apply_bulk_transition(actor, ids, parsed)
        return jsonify(result.to_dict())

    @app.route("/approvals/pending/reject-all", methods=["POST"], endpoint="reject_all_pending")
    def reject_all_pending():
        actor = container.identity_service.current_actor(session_context())
        result = container.approval_workflow.reject_all_pending(actor)
        return jsonify(result.to_dict())
