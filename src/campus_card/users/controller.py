from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import json_body, parse_enum, session_context
from ..core.enums import CardState, Role
from ..core.exceptions import ValidationError
from ..container import Container
from ..identity.model import SessionContext
from ..identity.service import landing_route


def register(app: Flask, container: Container) -> None:
    def _parse_role(value) -> Role:
        role = parse_enum(Role, value, "role")
        if role is None:
            raise ValidationError("Role is required")
        return role

    @app.route("/auth/register", methods=["POST"], endpoint="register")
    def register_account():
        data = json_body()
        user = container.auth_service.register(
            email=data.get("email", ""),
            password=data.get("password", ""),
            confirm_password=data.get("confirmPassword", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            card_number=data.get("cardNumber", ""),
            role=_parse_role(data.get("role") or Role.STUDENT.value),
            department=data.get("department", ""),
            image_url=data.get("imageUrl") or None,
        )
        return (
            jsonify(
                {
                    "user": user.to_public_dict(),
                    "message": "Registration successful. Your account is pending approval.",
                }
            ),
            201,
        )

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.update(SessionContext(uid=user.uid).to_session())
        session.permanent = bool(data.get("rememberMe"))

        return jsonify({"user": user.to_public_dict(), "landing": landing_route(user)})

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Signed out"})

    @app.route("/me", methods=["GET"], endpoint="me")
    def me():
        user = container.identity_service.current_user(session_context())
        return jsonify({"user": user.to_public_dict(), "landing": landing_route(user)})

    @app.route("/users", methods=["GET"], endpoint="list_users")
    def list_users():
        actor = container.identity_service.current_actor(session_context())
        users = container.user_service.list_users(
            actor=actor,
            role=parse_enum(Role, request.args.get("role"), "role"),
            department=request.args.get("department") or None,
            state=parse_enum(CardState, request.args.get("state"), "state"),
            query=request.args.get("q", ""),
        )
        return jsonify({"users": [u.to_public_dict() for u in users]})

    @app.route("/admin/users", methods=["POST"], endpoint="add_user")
    def add_user():
        actor = container.identity_service.current_actor(session_context())
        data = json_body()
        if data.get("password", "") != data.get("confirmPassword", ""):
            raise ValidationError("Passwords do not match")

        user = container.user_service.create_account(
            actor=actor,
            email=data.get("email", ""),
            password=data.get("password", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            card_number=data.get("cardNumber", ""),
            role=_parse_role(data.get("role")),
            department=data.get("department", ""),
        )
        return jsonify({"user": user.to_public_dict(), "message": f'"{user.full_name}" has been added'}), 201

    @app.route("/admin/users/<uid>/nfc", methods=["POST"], endpoint="assign_nfc")
    def assign_nfc(uid: str):
        actor = container.identity_service.current_actor(session_context())
        user = container.user_service.assign_nfc_id(actor=actor, uid=uid, nfc_id=json_body().get("nfcId"))
        return jsonify({"user": user.to_public_dict()})

    @app.route("/admin/staff/<uid>/approval-permission", methods=["POST"], endpoint="approval_permission")
    def approval_permission(uid: str):
        actor = container.identity_service.current_actor(session_context())
        user = container.user_service.set_approval_permission(
            actor=actor, uid=uid, can_approve=bool(json_body().get("canApprove"))
        )
        return jsonify({"user": user.to_public_dict(), "message": "Permissions updated successfully"})
