"""
Feature modules live under this package.

Each module owns its models, service functions and blueprint, and reuses the
platform primitives (config, DB session, CSRF) from app.sourceflow.
"""
