"""Update GitHub repository secrets from an AWS Secrets Manager secret."""

__version__ = "0.1.0"
