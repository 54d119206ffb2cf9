"""
Models package for the Daily Problem Scraper
Contains the normalized problem record and its parts
"""

from .problem import (
    Credentials, Problem, ProblemConstraint, ProblemExample, ProviderType,
    MAX_CONSTRAINT_LENGTH, normalize_topics, problem_date_for
)

__all__ = [
    'Credentials',
    'Problem',
    'ProblemConstraint',
    'ProblemExample',
    'ProviderType',
    'MAX_CONSTRAINT_LENGTH',
    'normalize_topics',
    'problem_date_for'
]
