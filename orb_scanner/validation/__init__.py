"""
Output contract validation.
"""
