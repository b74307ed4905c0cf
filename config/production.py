import os

from .common import *  # noqa: F401,F403
from .common import db_config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config("staffing_billing")

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
