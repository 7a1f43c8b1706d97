"""
Authentication: password and OAuth sign-in, sessions and route guards.
"""
