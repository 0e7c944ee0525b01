"""
Accounts and session tokens.
"""
