"""
Public profiles and profile updates.
"""
