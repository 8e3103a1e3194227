"""
Runnable sample seed applications
"""
