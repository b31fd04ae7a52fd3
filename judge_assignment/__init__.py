"""
Judge-Team Assignment & Workload Balancing Engine.
"""
__version__ = "1.0.0"
