"""
Shared constants
"""
