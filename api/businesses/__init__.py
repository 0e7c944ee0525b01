"""
Businesses and their reviews.
"""
