"""
Elysia Lambda - build and deploy Bun/Elysia services to AWS Lambda.

This package bundles an Elysia entry point into a Lambda deployment archive and
creates or updates the target Lambda function. It also provides a setup wizard
that publishes the Bun runtime layer.
"""

__version__ = "0.1.0"
