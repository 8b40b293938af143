"""
Logging and metrics for the pipeline's outer layers.
"""
