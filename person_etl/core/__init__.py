"""
Core models and error types shared by every pipeline component.
"""
