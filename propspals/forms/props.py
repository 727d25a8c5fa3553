from wtforms.validators import DataRequired, Length, NumberRange, Optional

from propspals.forms import JsonForm
from propspals.forms.fields import JsonIntegerField, JsonStringField, JsonStringListField
from propspals.forms.validators import EachLength, ListLength

MAX_OPTIONS = 10
MAX_POINT_VALUE = 1000


class CreatePropForm(JsonForm):
    question_text = JsonStringField(
        "Question",
        validators=[
            DataRequired(message="Question text is required"),
            Length(max=500, message="Question cannot exceed 500 characters"),
        ],
    )
    options = JsonStringListField(
        "Options",
        validators=[
            ListLength(
                min=2,
                max=MAX_OPTIONS,
                message=f"A prop needs between 2 and {MAX_OPTIONS} options",
            ),
            EachLength(min=1, max=200, message="Options must be 1 to 200 characters"),
        ],
    )
    point_value = JsonIntegerField(
        "Points",
        validators=[
            NumberRange(
                min=1,
                max=MAX_POINT_VALUE,
                message=f"Point value must be between 1 and {MAX_POINT_VALUE}",
            )
        ],
    )
    category = JsonStringField(
        "Category",
        validators=[
            Optional(),
            Length(max=50, message="Category cannot exceed 50 characters"),
        ],
    )


class UpdatePropForm(JsonForm):
    question_text = JsonStringField(
        "Question",
        validators=[
            Optional(),
            Length(min=1, max=500, message="Question must be 1 to 500 characters"),
        ],
    )
    options = JsonStringListField("Options")
    point_value = JsonIntegerField(
        "Points",
        validators=[
            Optional(),
            NumberRange(
                min=1,
                max=MAX_POINT_VALUE,
                message=f"Point value must be between 1 and {MAX_POINT_VALUE}",
            ),
        ],
    )
    category = JsonStringField(
        "Category",
        validators=[
            Optional(),
            Length(max=50, message="Category cannot exceed 50 characters"),
        ],
    )

    def validate_options(self, field):
        # Only checked when the caller sends options at all
        if self.provided("options"):
            ListLength(
                min=2,
                max=MAX_OPTIONS,
                message=f"A prop needs between 2 and {MAX_OPTIONS} options",
            )(self, field)
            EachLength(min=1, max=200, message="Options must be 1 to 200 characters")(
                self, field
            )

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        fields = ("question_text", "options", "point_value", "category")
        if not any(self.provided(name) for name in fields):
            self.form_errors.append("No valid changes provided")
            return False
        return True


class ReorderPropsForm(JsonForm):
    prop_ids = JsonStringListField(
        "Prop IDs",
        validators=[ListLength(min=1, message="propIds must list at least one prop")],
    )


class ResolvePropForm(JsonForm):
    correct_option_index = JsonIntegerField(
        "Correct Option",
        validators=[
            NumberRange(min=0, message="correctOptionIndex must be a non-negative integer")
        ],
    )


class SubmitPickForm(JsonForm):
    prop_id = JsonStringField(
        "Prop", validators=[DataRequired(message="propId is required")]
    )
    selected_option_index = JsonIntegerField(
        "Selected Option",
        validators=[
            NumberRange(min=0, message="selectedOptionIndex must be a non-negative integer")
        ],
    )
