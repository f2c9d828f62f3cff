"""HeartPi heart-health risk engine.

Turns lifestyle survey answers into a heart-disease risk tier, simulates
physiological readings consistent with that tier, and keeps a flat,
user-keyed record of credentials and heart-rate history.
"""

__version__ = "0.1.0"
