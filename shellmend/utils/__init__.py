"""
Utility helpers for shellmend.
"""
