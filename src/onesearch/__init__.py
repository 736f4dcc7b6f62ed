"""OneSearch federation service.

Lets a governing node and its brand nodes share search credentials and
configuration without a central broker.
"""

__version__ = "0.1.0"
