import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///spinboard.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Bearer tokens issued by the reference authority (seconds). 0 disables expiry.
    TOKEN_MAX_AGE_SEC = int(os.environ.get('TOKEN_MAX_AGE_SEC', '0'))
    # Scoring service base address the client talks to
    BACKEND_URL = os.environ.get('SPINBOARD_BACKEND_URL') or 'http://localhost:3005'
    # Per-tab session persistence
    STATE_DIR = os.environ.get('SPINBOARD_STATE_DIR') or os.path.join(os.path.expanduser('~'), '.spinboard')
    TAB_ID = os.environ.get('SPINBOARD_TAB_ID') or 'default'
    # Optional: request timeout (sec). 0 waits indefinitely.
    REQUEST_TIMEOUT_SEC = float(os.environ.get('SPINBOARD_REQUEST_TIMEOUT_SEC', '0'))
    LOG_LEVEL = os.environ.get('SPINBOARD_LOG_LEVEL', 'INFO')
