"""Geo Attendance package.

This package is organized by feature modules (sessions, attendance, store, users)
with a thin Flask controller layer over service and store layers.
"""
