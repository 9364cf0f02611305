"""Cloud Run service, job and instance metadata configuration, and Cloud Logging log formatting."""

__version__ = "0.3.0"