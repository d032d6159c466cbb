"""
Real estate DCF engine.
"""
