"""
Budget request forms
"""
from decimal import Decimal
from wtforms import BooleanField, DateField, DecimalField, SelectField, StringField
from wtforms.validators import DataRequired, Length, Optional, ValidationError
from models.enums import PeriodType
from utils.forms import ApiForm

MIN_BUDGET_AMOUNT = Decimal('0.01')


class BudgetCreateForm(ApiForm):
    """New budget.  A missing end date is derived from the period type."""
    cif_id = StringField('Customer ID', validators=[
        DataRequired(message='Customer ID is required'),
        Length(max=100),
    ])
    category = StringField('Category', validators=[
        DataRequired(message='Category is required'),
        Length(max=100),
    ])
    budget_amount = DecimalField('Budget amount')
    period_type = SelectField(
        'Period type',
        choices=[(p.name, p.display_name) for p in PeriodType],
        validators=[DataRequired(message='Period type is required')],
    )
    start_date = DateField('Start date', validators=[DataRequired(message='Start date is required')])
    end_date = DateField('End date', validators=[Optional()])
    alert_threshold_80 = BooleanField('Alert at 80%')
    alert_threshold_100 = BooleanField('Alert at 100%')
    rollover_enabled = BooleanField('Rollover')

    def validate_budget_amount(self, field):
        if field.data is None:
            raise ValidationError('Budget amount is required')
        if field.data < MIN_BUDGET_AMOUNT:
            raise ValidationError('Budget amount must be greater than 0')

    def validate_end_date(self, field):
        if field.data and self.start_date.data and field.data < self.start_date.data:
            raise ValidationError('End date must be on or after start date')


class BudgetUpdateForm(ApiForm):
    """Partial update; only the fields sent are applied"""
    budget_amount = DecimalField('Budget amount', validators=[Optional()])
    end_date = DateField('End date', validators=[Optional()])
    is_active = BooleanField('Active')
    alert_threshold_80 = BooleanField('Alert at 80%')
    alert_threshold_100 = BooleanField('Alert at 100%')
    rollover_enabled = BooleanField('Rollover')

    def validate_budget_amount(self, field):
        if field.data is not None and field.data < MIN_BUDGET_AMOUNT:
            raise ValidationError('Budget amount must be greater than 0')
