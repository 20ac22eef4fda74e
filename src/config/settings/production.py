"""
Production settings for PIREP Service
"""

import os

from .base import *

DEBUG = False

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

LOGGING['loggers']['apps']['level'] = os.environ.get('APP_LOG_LEVEL', 'INFO')
