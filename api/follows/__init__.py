"""
Directed follow relationships between users.
"""
