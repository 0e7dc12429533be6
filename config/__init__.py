"""
Configuration for the RF Online server.

Settings are read from the environment (and a local .env file) in
``settings.py``.
"""
