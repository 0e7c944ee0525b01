"""
Events and event registrations (registration + registered cars).
"""
