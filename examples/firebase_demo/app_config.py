import os

from dotenv import load_dotenv

from firebase_jwt import (
    AuthExtension,
    CookieExtractor,
    FirebaseJwtVerifier,
    FirebaseJwtVerifierOptions,
)

load_dotenv()
GLOBAL_CONFIG = {
    "FIREBASE_PROJECT_ID": os.environ.get("FIREBASE_PROJECT_ID", ""),
    "FIREBASE_TENANT_ID": os.environ.get("FIREBASE_TENANT_ID") or None,
    "SESSION_COOKIE_NAME": os.environ.get("SESSION_COOKIE_NAME", "session"),
}

FIREBASE_PROJECT_ID = GLOBAL_CONFIG["FIREBASE_PROJECT_ID"]
FIREBASE_TENANT_ID = GLOBAL_CONFIG["FIREBASE_TENANT_ID"]
SESSION_COOKIE_NAME = GLOBAL_CONFIG["SESSION_COOKIE_NAME"]


def build_verifier() -> FirebaseJwtVerifier:
    options = FirebaseJwtVerifierOptions(
        project_id=FIREBASE_PROJECT_ID,
        tenant_id=FIREBASE_TENANT_ID,
    )
    return FirebaseJwtVerifier(options)


# auth will be the ext imported in the Flask app; the verifier is attached
# in create_app() so a missing project id fails at startup, not at import
auth = AuthExtension(session_extractor=CookieExtractor(SESSION_COOKIE_NAME))
