"""
SE Ranking Report Engine

Builds a consolidated SEO report for a target domain:
1. Collects data from the SE Ranking API through a rate-limited, credit-accounted client
2. Normalizes every endpoint family into stable records with safe defaults
3. Aggregates keyword and backlink gaps across competitors
4. Compiles the final report with quick wins and an executive summary
"""

__version__ = "0.1.0"
