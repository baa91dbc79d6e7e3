"""
Strata: adaptive question selection and mastery tracking for kanji study.
"""

__version__ = "1.0.0"
