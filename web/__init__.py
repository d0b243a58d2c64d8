"""
Web interface package for the XAX alias API.
"""

from web.app import app

__all__ = ['app']
