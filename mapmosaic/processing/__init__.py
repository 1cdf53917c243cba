"""
Turning maps into images.
"""
