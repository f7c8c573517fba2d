#!/usr/bin/env python
"""
SceptView Network Monitor - Django Management Script

Command-line entry point for the monitor backend: development server,
database migrations, the test suite and shell access.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file

Usage:
    python manage.py migrate
    python manage.py runserver
    python manage.py test apps.monitor
"""
import os
import sys


def main():
    """Run administrative tasks."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Install the project first "
            "(pip install -e .) and activate its virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
