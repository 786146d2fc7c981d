"""
B2B Showcase catalog Django project.
"""
