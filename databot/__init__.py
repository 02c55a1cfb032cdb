"""
DataBot

Google Chat bot that turns questions into BigQuery SQL and answers from the results.
"""

__version__ = "0.1.0"
