import re

from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict

from propspals.errors import ValidationError


def _to_snake(key):
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _to_camel(name):
    return re.sub(r"_([a-z])", lambda match: match.group(1).upper(), name)


class JsonForm(FlaskForm):
    """
    Form validated from a decoded JSON body instead of request.form

    JSON keys are camelCase (``captainName``); form fields are snake_case
    (``captain_name``). Error messages name the JSON key.
    """

    class Meta:
        csrf = False

    def __init__(self, payload, **kwargs):
        payload = payload if isinstance(payload, dict) else {}
        self.json_keys = {_to_snake(key): key for key in payload}
        self.payload = {_to_snake(key): value for key, value in payload.items()}
        super().__init__(formdata=ImmutableMultiDict(self.payload), **kwargs)

    def validate(self, extra_validators=None):
        valid = super().validate(extra_validators=extra_validators)

        # MultiDict flattens arrays, so a list sent for a scalar field would
        # otherwise arrive as its first element
        for name, field in self._fields.items():
            if isinstance(self.payload.get(name), list) and not getattr(
                field, "accepts_list", False
            ):
                field.errors = ["Must be a single value, not a list."]
                valid = False
        return valid

    def provided(self, name):
        """True when the JSON body carried the field, even as null or []"""
        return name in self.payload

    def first_error(self):
        for name, errors in self.errors.items():
            if not errors:
                continue
            if name is None:
                return errors[0]
            key = self.json_keys.get(name) or _to_camel(name)
            return f"{key}: {errors[0]}"
        return "Invalid input"


def parse_payload(form_class, payload):
    """
    Validate a JSON payload against a form, raising VALIDATION_ERROR on failure

    Returns:
        the validated form
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    form = form_class(payload)
    if not form.validate():
        raise ValidationError(form.first_error())
    return form
