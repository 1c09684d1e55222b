"""Admin authentication, roles and user management"""
