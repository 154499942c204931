"""
Is It Good? clean-living analysis core.

This package classifies a product query (text or image) as a single
product or a menu/multi-item selection, verifies ingredient evidence
against several fallible sources, and produces either a scored clean
assessment or a relative ranking.

Structure:
- domain/: Business logic, rule sets, prompts and domain models
- infrastructure/: External concerns (reasoning API, product databases,
  web search, page fetch)
- application/: Entry points orchestrating domain services
- tests/: Test suite
"""

__version__ = "1.0.0"
