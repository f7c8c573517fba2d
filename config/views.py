"""
SceptView Network Monitor - Root Views

Root-level views that live outside the monitor app.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

from django.db import DatabaseError, connection
from django.http import JsonResponse


def health(request):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        JsonResponse: status "ok", or "degraded" with HTTP 503 when the
        database cannot be reached.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError:
        return JsonResponse(
            {"status": "degraded", "message": "database unavailable"},
            status=503,
        )

    return JsonResponse(
        {
            "status": "ok",
            "message": "backend alive",
        }
    )
