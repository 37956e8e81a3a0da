"""
Real-time sports arbitrage feed client.

Keeps a live, deduplicated board of arbitrage opportunities pushed by a
remote detection pipeline, survives an unreliable stream connection, and
sizes stakes for a chosen bankroll.
"""

__version__ = "1.0.0"
__author__ = "Tim"
