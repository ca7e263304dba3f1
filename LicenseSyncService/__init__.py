"""
License Sync Service Django project.
"""
