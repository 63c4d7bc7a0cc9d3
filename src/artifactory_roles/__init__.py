"""Artifactory roles API: reconciles declared roles onto Artifactory groups and permission targets."""

__version__ = "0.1.0"
