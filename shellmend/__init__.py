"""
shellmend: watches an interactive shell and suggests fixes for failed commands.
"""

__version__ = '0.1.0'
