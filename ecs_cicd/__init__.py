"""Provision and tear down an ECS Fargate deployment target for a CI/CD pipeline."""

__version__ = "0.1.0"
