from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import session_context
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/my-card", methods=["GET"], endpoint="my_card")
    def my_card():
        uid = session_context().require_uid()
        return jsonify({"card": container.card_service.card_for(uid).to_dict()})
