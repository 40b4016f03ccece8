"""Composable asynchronous operation pipelines: sequential, parallel and fallible ops."""

__version__ = "0.1.0"
__all__ = ["op", "try_op", "parallel", "agent_ops", "pipeline"]