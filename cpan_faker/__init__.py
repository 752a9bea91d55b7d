"""
cpan-faker: build a bogus CPAN-like repository tree for testing.
"""

__version__ = "0.3.0"
