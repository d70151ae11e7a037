# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the Flask application.
# Uses environment variables for sensitive data to keep them out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration class. Contains default settings that can be overridden
    by environment-specific configurations.
    """
    # --- Security ---
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-should-really-set-a-secret-key-in-your-env-file'

    # The upload endpoints are called by the front end with multipart posts.
    WTF_CSRF_ENABLED = _env_flag('WTF_CSRF_ENABLED', False)

    # --- File Upload Configuration ---
    # Attendance, salary and sales sheets may be CSV or Excel workbooks.
    ALLOWED_EXTENSIONS = {'.csv', '.xlsx', '.xls'}

    # Each uploaded sheet is limited to 10 MB.
    MAX_UPLOAD_BYTES = 10 * 1024 * 1024

    # A payroll request carries three sheets, so the request limit is larger.
    MAX_CONTENT_LENGTH = 32 * 1024 * 1024

    # --- Sheet Detection ---
    # How many leading rows are searched for a header row.
    HEADER_SCAN_ROWS = int(os.environ.get('HEADER_SCAN_ROWS') or 10)

    # --- Logging ---
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
