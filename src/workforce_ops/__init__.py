"""Workforce operations package.

This package is organized by feature modules (attendance, sales, settings,
notifications) with a thin Flask controller layer and service/repository layers.
"""
