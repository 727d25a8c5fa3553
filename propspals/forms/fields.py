"""
Form fields that accept JSON-typed values

Flask-WTF turns a JSON body into a MultiDict, so a field receives the decoded
JSON value itself rather than a string. These fields insist on the JSON type
they expect instead of coercing ("3" is not an integer, 1 is not a string).
"""

from wtforms import Field, IntegerField, StringField


class JsonStringField(StringField):
    """String field that rejects non-string JSON values and trims whitespace"""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if value is None:
            self.data = None
            return
        if not isinstance(value, str):
            self.data = None
            raise ValueError(self.gettext("Must be a string."))
        self.data = value.strip()


class JsonIntegerField(IntegerField):
    """Integer field that only accepts JSON integers (not booleans or floats)"""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if value is None:
            self.data = None
            return
        if isinstance(value, bool) or not isinstance(value, int):
            self.data = None
            raise ValueError(self.gettext("Not a valid integer value."))
        self.data = value


class JsonStringListField(Field):
    """A JSON array of strings; each entry is trimmed"""

    accepts_list = True

    def _value(self):
        return self.data or []

    def process_formdata(self, valuelist):
        # MultiDict spreads a JSON array into one value per element
        items = []
        for value in valuelist:
            if not isinstance(value, str):
                self.data = None
                raise ValueError(self.gettext("Every entry must be a string."))
            items.append(value.strip())
        self.data = items
