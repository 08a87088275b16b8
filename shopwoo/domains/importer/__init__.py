"""
Import orchestration: scheduling, batch processing and progress
"""
