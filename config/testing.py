from .common import *  # noqa: F401,F403
from .common import db_config, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config("staffing_billing_test")

DEBUG = False
TESTING = True

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
