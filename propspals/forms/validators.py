from wtforms.validators import ValidationError


class ListLength:
    """Validate the number of entries in a list field"""

    def __init__(self, min=None, max=None, message=None):
        self.min = min
        self.max = max
        self.message = message

    def __call__(self, form, field):
        count = len(field.data or [])
        if (self.min is not None and count < self.min) or (
            self.max is not None and count > self.max
        ):
            raise ValidationError(
                self.message or f"Must have between {self.min} and {self.max} entries"
            )


class EachLength:
    """Validate the length of every string in a list field"""

    def __init__(self, min=1, max=None, message=None):
        self.min = min
        self.max = max
        self.message = message

    def __call__(self, form, field):
        for item in field.data or []:
            if len(item) < self.min or (self.max is not None and len(item) > self.max):
                raise ValidationError(
                    self.message
                    or f"Each entry must be between {self.min} and {self.max} characters"
                )
