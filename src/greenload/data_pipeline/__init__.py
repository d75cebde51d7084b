"""Data pipeline package.

Sample/result schemas and history loading helpers.
"""
