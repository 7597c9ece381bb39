"""
Archai - Repository architecture inference.

Turns a codebase archive, a GitHub repository or a compose manifest into a
typed service graph, and explains that graph in plain language.
"""

__version__ = "0.1.0"
__author__ = "Archai"
