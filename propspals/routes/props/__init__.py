from flask import Blueprint

bp = Blueprint("props", __name__)

from propspals.routes.props import routes  # noqa: F401, E402
