"""LearnMaster agents: learning path assembly with resource verification."""

__version__ = "0.1.0"
