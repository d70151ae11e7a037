# ==============================================================================
# app/main/forms.py
# ------------------------------------------------------------------------------
# Defines upload and settings forms using Flask-WTF for input validation.
# ==============================================================================

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import FloatField, TextAreaField
from wtforms.validators import InputRequired, NumberRange, Optional, ValidationError

from app.calculator.validator import validate_slabs

SHEET_EXTENSIONS = ['csv', 'xlsx', 'xls']
SHEET_MESSAGE = 'Invalid file type. Please upload CSV or Excel file'


def _sheet_field(label, missing_message):
    return FileField(label, validators=[
        FileRequired(message=missing_message),
        FileAllowed(SHEET_EXTENSIONS, message=SHEET_MESSAGE),
    ])


class PayrollUploadForm(FlaskForm):
    """The two outlet attendance sheets and the salary sheet."""
    outlet1 = _sheet_field('Outlet 1 attendance', 'Please upload attendance sheet for Outlet 1')
    outlet2 = _sheet_field('Outlet 2 attendance', 'Please upload attendance sheet for Outlet 2')
    salary = _sheet_field('Salary sheet', 'Please upload salary sheet')
    # JSON: {"advances": {name: [{date, amount}]}, "bonuses": {...}}
    entries = TextAreaField('Advances and bonuses', validators=[Optional()])


class IncentiveUploadForm(FlaskForm):
    """Sales and attendance sheets plus the two incentive slabs."""
    sales = _sheet_field('Sales sheet', 'Please upload sales sheet')
    attendance = _sheet_field('Attendance sheet', 'Please upload attendance sheet')
    slab1_amount = FloatField('Slab 1 Amount', validators=[
        InputRequired(message='Slab 1 Amount is required'),
        NumberRange(min=0, message='Slab 1 Amount must be a positive number')])
    slab1_incentive = FloatField('Slab 1 Incentive', validators=[
        InputRequired(message='Slab 1 Incentive is required'),
        NumberRange(min=0, message='Slab 1 Incentive must be a positive number')])
    slab2_amount = FloatField('Slab 2 Amount', validators=[
        InputRequired(message='Slab 2 Amount is required'),
        NumberRange(min=0, message='Slab 2 Amount must be a positive number')])
    slab2_incentive = FloatField('Slab 2 Incentive', validators=[
        InputRequired(message='Slab 2 Incentive is required'),
        NumberRange(min=0, message='Slab 2 Incentive must be a positive number')])

    def validate_slab2_amount(self, field):
        if self.slab1_amount.data is None or field.data is None:
            return
        if any('Slab 2 Amount must be greater' in error for error in validate_slabs(self.slab_values())):
            raise ValidationError('Slab 2 Amount must be greater than Slab 1 Amount')

    def slab_values(self):
        return {
            'slab1_amount': self.slab1_amount.data,
            'slab1_incentive': self.slab1_incentive.data,
            'slab2_amount': self.slab2_amount.data,
            'slab2_incentive': self.slab2_incentive.data,
        }
