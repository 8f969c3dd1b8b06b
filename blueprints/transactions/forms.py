from wtforms import IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError
from utils.forms import ApiForm, DateRangeForm


class TransactionFilterForm(DateRangeForm):
    """Body of POST /transactions/filter; dates are whole days"""
    cif_id = StringField('Customer ID', validators=[DataRequired(message='Customer ID is required')])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    page = IntegerField('Page', default=0, validators=[Optional(), NumberRange(min=0)])
    size = IntegerField('Size', default=20, validators=[Optional(), NumberRange(min=1, max=100)])
    sort_by = SelectField('Sort by', default='transaction_date', validators=[Optional()], choices=[
        ('transaction_date', 'Transaction date'),
        ('amount', 'Amount'),
        ('merchant', 'Merchant'),
        ('category', 'Category'),
    ])
    sort_direction = StringField('Sort direction', default='DESC', validators=[Optional()])

    def validate_sort_direction(self, field):
        if field.data and field.data.upper() not in ('ASC', 'DESC'):
            raise ValidationError('Sort direction must be ASC or DESC')


class RecategorizeForm(ApiForm):
    category = StringField('Category', validators=[
        DataRequired(message='Category is required'),
        Length(max=100),
    ])
