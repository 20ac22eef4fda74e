"""
Test settings for PIREP Service
"""

from .base import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'pirep-service-tests',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

EVENT_BACKEND = 'memory'
ROUTE_DISTANCE_MEASURE = 'flat'
PIREP_STATE_TOGGLE_ANY_TARGET = False
