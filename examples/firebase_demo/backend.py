from flask import Flask, g, jsonify
from flask_cors import CORS

from examples.firebase_demo.app_config import auth, build_verifier
from firebase_jwt import TokenVerifier


def create_app(verifier: TokenVerifier | None = None) -> Flask:
    """
    Create and configure the Flask application with Firebase authentication.

    Args:
        verifier: Optional verifier to use instead of one built from the
            environment.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    auth.init_app(app, verifier=verifier or build_verifier())

    CORS(
        app,
        origins=[
            "https://localhost:5000",
            "https://127.0.0.1:5000",
        ],
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        methods=["GET", "POST", "OPTIONS"],
        max_age=3600,
    )

    @app.get("/api/me")
    @auth.require_id_token()
    def me():
        """Return the caller's identity from a Bearer ID token."""
        return jsonify(
            {
                "uid": g.claims["uid"],
                "sign_in_provider": g.claims["firebase"].get("sign_in_provider"),
                "tenant": g.claims["firebase"].get("tenant"),
            }
        ), 200

    @app.get("/api/session")
    @auth.require_session()
    def session():
        """Return the caller's identity from the session cookie."""
        return jsonify({"uid": g.claims["uid"], "authenticated": True}), 200

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle unauthorized access errors."""
        return jsonify(
            {
                "status": "denied",
                "message": error.description,
                "authenticated": False,
            }
        ), 401

    @app.errorhandler(404)
    def not_found(error):
        """Handle not found errors."""
        return jsonify(
            {
                "status": "error",
                "message": "Resource not found.",
            }
        ), 404

    return app
