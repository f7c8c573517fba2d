"""
SceptView Network Monitor - ASGI Configuration

Exposes the monitor backend as an ASGI callable named 'application'
for async servers such as uvicorn or daphne.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_asgi_application()
