"""
Carries pool secrets between requests

The browser keeps one secret per pool in Flask's signed session cookie.
API clients without cookies may send the secret in the X-Pool-Secret header
or as a ``secret`` query parameter. Services never read this directly; routes
fetch the secret here and pass it on explicitly.
"""

from flask import request, session

SESSION_KEY = "pool_secrets"
SECRET_HEADER = "X-Pool-Secret"


def get_pool_secret(code):
    """Return the caller's secret for a pool, or None"""
    secret = (session.get(SESSION_KEY) or {}).get(code)
    if secret:
        return secret

    secret = request.headers.get(SECRET_HEADER) or request.args.get("secret")
    return secret or None


def set_pool_secret(code, secret):
    """Remember the caller's secret for a pool"""
    secrets_by_pool = dict(session.get(SESSION_KEY) or {})
    secrets_by_pool[code] = secret
    session[SESSION_KEY] = secrets_by_pool
    session.permanent = True
    session.modified = True
