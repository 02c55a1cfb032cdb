"""
Pipeline package for DataBot.

Contains the turn orchestrator that connects credentials, LLM, query
execution and chat messaging into one run.
"""

from databot.pipeline.orchestrator import TurnPipeline, create_credential_cache, create_pipeline

__all__ = ["TurnPipeline", "create_credential_cache", "create_pipeline"]
