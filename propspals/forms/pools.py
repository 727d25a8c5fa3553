from wtforms.validators import AnyOf, DataRequired, Length, Optional, Regexp

from propspals.forms import JsonForm
from propspals.forms.fields import JsonStringField
from propspals.models.pool import POOL_STATUSES, STATUS_DRAFT, STATUS_OPEN


class CreatePoolForm(JsonForm):
    name = JsonStringField(
        "Pool Name",
        validators=[
            DataRequired(message="Pool name is required"),
            Length(max=100, message="Pool name cannot exceed 100 characters"),
        ],
    )
    captain_name = JsonStringField(
        "Captain Name",
        validators=[
            DataRequired(message="Captain name is required"),
            Length(max=50, message="Captain name cannot exceed 50 characters"),
        ],
    )
    description = JsonStringField(
        "Description",
        validators=[
            Optional(),
            Length(max=500, message="Description cannot exceed 500 characters"),
        ],
    )
    buy_in_amount = JsonStringField(
        "Buy-in",
        validators=[
            Optional(),
            Length(max=20, message="Buy-in cannot exceed 20 characters"),
        ],
    )
    invite_code = JsonStringField(
        "Invite Code",
        validators=[
            Optional(),
            Length(min=3, max=30, message="Invite code must be between 3 and 30 characters"),
            Regexp(
                r"^[a-zA-Z0-9-]+$",
                message="Invite code may only contain letters, numbers and hyphens",
            ),
        ],
    )
    status = JsonStringField(
        "Initial Status",
        validators=[
            Optional(),
            AnyOf(
                [STATUS_DRAFT, STATUS_OPEN],
                message="Pool must start as draft or open",
            ),
        ],
    )


class UpdatePoolForm(JsonForm):
    name = JsonStringField(
        "Pool Name",
        validators=[
            Optional(),
            Length(min=1, max=100, message="Pool name must be between 1 and 100 characters"),
        ],
    )
    description = JsonStringField(
        "Description",
        validators=[
            Optional(),
            Length(max=500, message="Description cannot exceed 500 characters"),
        ],
    )
    status = JsonStringField(
        "Status",
        validators=[
            Optional(),
            AnyOf(list(POOL_STATUSES), message="Unknown pool status"),
        ],
    )

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if not any(self.provided(name) for name in ("name", "description", "status")):
            self.form_errors.append("No valid changes provided")
            return False
        if self.provided("name") and not self.name.data:
            self.name.errors.append("Pool name cannot be empty")
            return False
        return True


class JoinPoolForm(JsonForm):
    name = JsonStringField(
        "Name",
        validators=[
            DataRequired(message="Name is required"),
            Length(max=50, message="Name cannot exceed 50 characters"),
        ],
    )


class RecoverForm(JsonForm):
    token = JsonStringField(
        "Recovery Token",
        validators=[
            DataRequired(message="Recovery token is required"),
            Length(max=128, message="Recovery token is malformed"),
        ],
    )
