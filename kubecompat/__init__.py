"""Version-tolerant access to Kubernetes workload resources through a common model."""

__version__ = "0.1.0"