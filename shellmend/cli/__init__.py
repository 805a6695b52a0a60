"""
Command-line interface for shellmend.
"""
from .main import app

__all__ = ['app']
