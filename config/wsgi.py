"""
SceptView Network Monitor - WSGI Configuration

Exposes the monitor backend as a WSGI callable named 'application'
for gunicorn or any other WSGI server.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_wsgi_application()
