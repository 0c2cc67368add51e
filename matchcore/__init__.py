"""
Match scoring, confidence, match quality and judgment-memory engine.
"""
