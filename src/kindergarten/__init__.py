"""Kindergarten management API.

This package is organized by feature modules (children, groups, attendance,
finance, ...) with a thin Flask controller layer on top of service and
repository layers.
"""
