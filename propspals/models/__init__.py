from propspals import db  # noqa: F401 - imported for model imports

from .participant import Participant
from .pick import Pick
from .pool import Pool
from .prop import Prop
from .recovery_token import RecoveryToken

__all__ = [
    "Pool",
    "Participant",
    "Prop",
    "Pick",
    "RecoveryToken",
]
