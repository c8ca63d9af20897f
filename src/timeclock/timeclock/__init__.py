"""Time clock package.

This package is organized by feature modules (records, tracker, reports, sync,
relay, ...) with a thin Flask controller layer and service/repository layers.
"""
