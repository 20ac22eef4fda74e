"""
Development settings for PIREP Service
"""

from .base import *

DEBUG = True
ALLOWED_HOSTS = ['*']
