"""Data models for KubeTree."""
