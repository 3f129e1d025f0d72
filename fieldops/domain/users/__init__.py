"""Users domain - Privileged user management"""
