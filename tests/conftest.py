"""Pytest configuration for qdebug tests.

Registers hypothesis settings profiles; pick one with HYPOTHESIS_PROFILE.
"""

import os

from hypothesis import settings, Verbosity


settings.register_profile("fast", max_examples=25, deadline=None)
settings.register_profile("thorough", max_examples=500, deadline=None)
settings.register_profile("debug", max_examples=10, deadline=None, verbosity=Verbosity.verbose)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))
