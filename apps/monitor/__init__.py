"""
SceptView Network Monitor - Monitor Application

This Django application provides the monitoring API: sites, devices,
device links, metrics history, user roles, email notifications and the
activity log.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""
