# ==============================================================================
# app/main/routes.py
# ------------------------------------------------------------------------------
# Upload endpoints for the payroll and incentive calculators.
# Each request carries its own files and runs the whole pipeline; nothing is
# stored between requests.
# ==============================================================================

import json

from flask import Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from app.calculator.engine import (CalculationConfig, calculate_incentive_batch, calculate_payroll_batch,
                                   prepare_incentive, prepare_payroll)
from app.calculator.errors import CalculatorError
from app.calculator.export import daily_incentive_csv, monthly_incentive_csv, payroll_summary_csv
from app.main import bp
from app.main.forms import IncentiveUploadForm, PayrollUploadForm
from app.main.utils import (parse_entries_field, prepare_incentive_data, prepare_payroll_data,
                            prepare_payroll_preview)

# --- Helper Functions ---


def _upload(field):
    """Reads an uploaded file into a (filename, bytes) pair."""
    storage = field.data
    return storage.filename, storage.read()


def _form_errors(form):
    return jsonify({'error': 'Invalid form submission', 'kind': 'form_error', 'errors': form.errors}), 422


def _csv_response(filename, text):
    return Response(text, mimetype='text/csv',
                    headers={'Content-Disposition': f'attachment; filename="{filename}"'})


def _payroll_batch(form):
    config = CalculationConfig.from_mapping(current_app.config)
    return prepare_payroll([_upload(form.outlet1), _upload(form.outlet2)], _upload(form.salary), config=config)


def register_error_handlers(app):
    @app.errorhandler(CalculatorError)
    def handle_calculator_error(error):
        app.logger.warning(f"Calculation aborted: {error}")
        body = {'error': str(error), 'kind': error.kind}
        if getattr(error, 'errors', None):
            body['errors'] = error.errors
        return jsonify(body), 400

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({'error': 'Upload is too large', 'kind': 'ingest_error'}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return error
        app.logger.error(f"Calculation failed unexpectedly: {error}", exc_info=True)
        return jsonify({'error': f'An unexpected error occurred during calculation: {error}',
                        'kind': 'internal_error'}), 500


# --- Main Application Routes ---

@bp.route('/', methods=['GET'])
def index():
    """Describes the available endpoints."""
    return jsonify({
        'service': 'Outlet Payroll & Incentive Calculator',
        'acceptedExtensions': sorted(current_app.config['ALLOWED_EXTENSIONS']),
        'endpoints': ['/payroll/preview', '/payroll/calculate', '/incentive/calculate'],
    })


@bp.route('/payroll/preview', methods=['POST'])
def payroll_preview():
    """Parses the three payroll sheets and returns the reconciled roster with warnings."""
    form = PayrollUploadForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    batch = _payroll_batch(form)
    return jsonify(prepare_payroll_preview(batch))


@bp.route('/payroll/calculate', methods=['POST'])
def payroll_calculate():
    """
    Runs the payroll pipeline. Advances and bonuses are posted as JSON in the
    'entries' field. With ?export=csv the summary table is returned as CSV.
    """
    form = PayrollUploadForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    try:
        advances, bonuses = parse_entries_field(form.entries.data)
    except (ValueError, json.JSONDecodeError) as e:
        return jsonify({'error': f'Invalid entries: {e}', 'kind': 'validation_error'}), 400

    batch = _payroll_batch(form)
    results, warnings = calculate_payroll_batch(batch, advances=advances, bonuses=bonuses)

    if request.args.get('export') == 'csv':
        return _csv_response(*payroll_summary_csv(results, batch.month, batch.year))

    current_app.logger.info(f"Payroll calculated for {len(results)} employee(s), {batch.month}/{batch.year}.")
    return jsonify(prepare_payroll_data(batch, results, warnings))


@bp.route('/incentive/calculate', methods=['POST'])
def incentive_calculate():
    """
    Runs the incentive pipeline. With ?export=daily or ?export=monthly the
    corresponding table is returned as CSV.
    """
    form = IncentiveUploadForm()
    if not form.validate_on_submit():
        return _form_errors(form)

    config = CalculationConfig.from_mapping(current_app.config)
    batch = prepare_incentive(_upload(form.sales), _upload(form.attendance), config=config)
    report, warnings = calculate_incentive_batch(batch, form.slab_values())

    export = request.args.get('export')
    if export == 'daily':
        return _csv_response(*daily_incentive_csv(report.daily, batch.month, batch.year))
    if export == 'monthly':
        return _csv_response(*monthly_incentive_csv(report.monthly, batch.month, batch.year))

    current_app.logger.info(f"Incentives calculated for {len(report.daily)} day(s), {batch.month}/{batch.year}.")
    return jsonify(prepare_incentive_data(batch, report, warnings))
