"""
Membership-gated content portal: Flask application and its subsystems.
"""
