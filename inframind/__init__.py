"""
InfraMind Health Prober

Probes externally managed services with concurrent HTTP bursts,
classifies their health and produces heuristic reliability reports.
"""

__version__ = "1.0.0"
