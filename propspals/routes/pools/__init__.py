from flask import Blueprint

bp = Blueprint("pools", __name__)

from propspals.routes.pools import routes  # noqa: F401, E402
