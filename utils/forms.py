"""
WTForms helpers for the JSON API.

API forms validate JSON bodies and query strings rather than HTML posts, so
they run without CSRF and are fed through ``json_formdata``, which turns a
JSON object into the string form data WTForms fields expect (``true`` ->
``'true'``, ``12.5`` -> ``'12.5'``, ``null`` -> absent).
"""
from datetime import timezone
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import DateField, DateTimeField, IntegerField
from wtforms.validators import DataRequired, NumberRange, Optional, ValidationError

from utils.exceptions import ValidationFailedError

ISO_DATETIME_FORMATS = [
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M:%S.%f%z',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%Y-%m-%dT%H:%M',
]


def to_naive_utc(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def json_formdata(payload):
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationFailedError([{
            'field': None,
            'message': 'Request body must be a JSON object',
            'rejected_value': None,
        }])

    formdata = MultiDict()
    for key, value in payload.items():
        if value is None or value == '':
            continue
        if isinstance(value, bool):
            formdata.add(key, 'true' if value else 'false')
        else:
            formdata.add(key, str(value))
    return formdata


class ApiForm(FlaskForm):
    """Base class for API forms"""

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls):
        return cls(formdata=json_formdata(request.get_json(silent=True)))

    @classmethod
    def from_args(cls):
        # empty values fall back to field defaults
        formdata = MultiDict((key, value) for key, value in request.args.items(multi=True) if value != '')
        return cls(formdata=formdata)

    def provided(self, name):
        """True if the client sent a value for field *name*"""
        raw = self[name].raw_data
        return bool(raw) and raw[0] not in (None, '')

    def cleaned_data(self):
        """Field data for the fields the client actually sent"""
        return {name: field.data for name, field in self._fields.items() if self.provided(name)}

    def validate_or_raise(self):
        if not self.validate():
            raise ValidationFailedError.from_form(self)
        return self


class DateRangeForm(ApiForm):
    start_date = DateField('Start date', validators=[DataRequired(message='Start date is required')])
    end_date = DateField('End date', validators=[DataRequired(message='End date is required')])

    def validate_end_date(self, field):
        if field.data and self.start_date.data and field.data < self.start_date.data:
            raise ValidationError('End date must be on or after start date')


class PageForm(ApiForm):
    page = IntegerField('Page', default=0, validators=[Optional(), NumberRange(min=0)])
    size = IntegerField('Size', default=20, validators=[Optional(), NumberRange(min=1, max=100)])


class MonthsForm(ApiForm):
    months = IntegerField('Months', default=6, validators=[Optional(), NumberRange(min=1, max=120)])


class DateTimeRangeForm(ApiForm):
    """Instant range from ISO-8601 query parameters; offsets are normalised to naive UTC"""
    start_date = DateTimeField('Start date', format=ISO_DATETIME_FORMATS,
                               validators=[DataRequired(message='Start date is required')])
    end_date = DateTimeField('End date', format=ISO_DATETIME_FORMATS,
                             validators=[DataRequired(message='End date is required')])

    def validate_end_date(self, field):
        if field.data and self.start_date.data and to_naive_utc(field.data) < to_naive_utc(self.start_date.data):
            raise ValidationError('End date must be on or after start date')

    def instant_range(self):
        return to_naive_utc(self.start_date.data), to_naive_utc(self.end_date.data)
