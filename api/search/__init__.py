"""
Substring search over users and builds.
"""
