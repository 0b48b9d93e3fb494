"""
API package containing versioned routes and the dependencies shared by
them (``deps``).
"""
