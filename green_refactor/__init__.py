"""
green-refactor: energy-efficiency audits of code selections via an LLM.
"""

__version__ = "0.1.0"
